"""
Property-based tests for the adapter fallback combinator.
"""

import asyncio
import io

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.audit_logger import AuditLogger
from domain_appraiser.enums import AdapterErrorCode, LogLevel
from domain_appraiser.fallback import AdapterFailure, AdapterResult, with_fallback


def make_logger() -> AuditLogger:
    return AuditLogger(output_format="json", output_stream=io.StringIO())


class TestFallbackProperty:
    """Any adapter failure is replaced by the fallback value."""

    @given(
        code=st.sampled_from(list(AdapterErrorCode)),
        fallback_value=st.integers(),
    )
    @settings(max_examples=50)
    def test_failures_use_fallback(self, code: AdapterErrorCode, fallback_value: int) -> None:
        """*For any* failure code, the fallback SHALL receive the failure and supply the value."""
        seen = []

        async def primary():
            return AdapterResult.fail(code, "failed")

        def fallback(failure: AdapterFailure) -> int:
            seen.append(failure)
            return fallback_value

        outcome = asyncio.run(with_fallback(1.0, primary, fallback))

        assert outcome.value == fallback_value
        assert outcome.used_fallback
        assert outcome.failure.code == code
        assert seen == [outcome.failure]

    @given(value=st.text(max_size=20))
    @settings(max_examples=50)
    def test_success_skips_fallback(self, value: str) -> None:
        """*For any* successful result, the fallback SHALL NOT be called."""
        async def primary():
            return AdapterResult.success(value)

        def fallback(failure):
            raise AssertionError("fallback must not run")

        outcome = asyncio.run(with_fallback(1.0, primary, fallback))

        assert outcome.value == value
        assert not outcome.used_fallback
        assert outcome.failure is None

    def test_timeout_becomes_timeout_failure(self) -> None:
        async def primary():
            await asyncio.sleep(5)
            return AdapterResult.success("late")

        outcome = asyncio.run(with_fallback(0.01, primary, lambda failure: "fallback"))

        assert outcome.value == "fallback"
        assert outcome.failure.code == AdapterErrorCode.TIMEOUT

    def test_exception_becomes_upstream_failure(self) -> None:
        async def primary():
            raise RuntimeError("connection reset")

        outcome = asyncio.run(with_fallback(1.0, primary, lambda failure: 0))

        assert outcome.failure.code == AdapterErrorCode.UPSTREAM_ERROR
        assert "RuntimeError" in outcome.failure.message

    def test_config_failures_logged_at_info(self) -> None:
        logger = make_logger()

        async def primary():
            return AdapterResult.fail(AdapterErrorCode.CONFIG_MISSING, "no key")

        asyncio.run(with_fallback(1.0, primary, lambda f: None, logger=logger, component="whois"))

        (entry,) = logger.entries
        assert entry.level == LogLevel.INFO
        assert entry.component == "whois"
        assert entry.data["error_code"] == "config_missing"

    def test_upstream_failures_logged_at_warn(self) -> None:
        logger = make_logger()

        async def primary():
            return AdapterResult.fail(AdapterErrorCode.UPSTREAM_ERROR, "HTTP 500")

        asyncio.run(with_fallback(1.0, primary, lambda f: None, logger=logger, component="traffic"))

        (entry,) = logger.entries
        assert entry.level == LogLevel.WARN
        assert entry.data["reason"] == "HTTP 500"


class TestAdapterFailureClassification:

    def test_config_errors(self) -> None:
        assert AdapterFailure(AdapterErrorCode.CONFIG_MISSING, "").is_config_error
        assert AdapterFailure(AdapterErrorCode.CONFIG_INVALID, "").is_config_error
        assert not AdapterFailure(AdapterErrorCode.TIMEOUT, "").is_config_error

    def test_transient_errors(self) -> None:
        assert AdapterFailure(AdapterErrorCode.TIMEOUT, "").is_transient
        assert AdapterFailure(AdapterErrorCode.UPSTREAM_ERROR, "").is_transient
        assert not AdapterFailure(AdapterErrorCode.PARSE_ERROR, "").is_transient
        assert not AdapterFailure(AdapterErrorCode.CONFIG_MISSING, "").is_transient

    def test_result_ok(self) -> None:
        assert AdapterResult.success(1).ok
        assert not AdapterResult.fail(AdapterErrorCode.TIMEOUT, "slow").ok
