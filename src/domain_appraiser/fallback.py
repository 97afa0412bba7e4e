"""
Adapter result types and the fallback combinator.

Every external adapter returns an AdapterResult instead of raising. The
with_fallback combinator races an adapter call against a time budget and
substitutes a local estimate whenever the call fails, so a broken integration
degrades one factor instead of the whole evaluation.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Protocol, TypeVar

from .audit_logger import AuditLogger
from .enums import AdapterErrorCode, LegalFlag
from .models import ComparableSale, DomainKey, WhoisSnapshot


T = TypeVar("T")

CONFIG_ERROR_CODES = frozenset({AdapterErrorCode.CONFIG_MISSING, AdapterErrorCode.CONFIG_INVALID})


@dataclass(frozen=True)
class AdapterFailure:
    """Typed failure reason returned by an adapter."""

    code: AdapterErrorCode
    message: str

    @property
    def is_config_error(self) -> bool:
        return self.code in CONFIG_ERROR_CODES

    @property
    def is_transient(self) -> bool:
        return self.code in (AdapterErrorCode.TIMEOUT, AdapterErrorCode.UPSTREAM_ERROR)


@dataclass(frozen=True)
class AdapterResult(Generic[T]):
    """Either a value or an AdapterFailure, never both."""

    value: Optional[T] = None
    failure: Optional[AdapterFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "AdapterResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, code: AdapterErrorCode, message: str) -> "AdapterResult[T]":
        return cls(failure=AdapterFailure(code=code, message=message))


@dataclass(frozen=True)
class FallbackOutcome(Generic[T]):
    """The value used for a factor and whether it came from the fallback."""

    value: T
    used_fallback: bool
    failure: Optional[AdapterFailure] = None


@dataclass(frozen=True)
class BrandabilityAssessment:
    score: int
    commentary: str


@dataclass(frozen=True)
class TrafficEstimate:
    monthly_traffic: int
    explanation: str = ""


@dataclass(frozen=True)
class TrademarkAssessment:
    has_conflict: bool
    severity: LegalFlag
    explanation: str = ""


class WhoisSource(Protocol):
    async def fetch(self, domain: str) -> AdapterResult[WhoisSnapshot]: ...


class BrandabilitySource(Protocol):
    async def fetch(self, domain: str) -> AdapterResult[BrandabilityAssessment]: ...


class TrafficSource(Protocol):
    async def fetch(self, domain: str) -> AdapterResult[TrafficEstimate]: ...


class TrademarkSource(Protocol):
    async def fetch(self, name: str) -> AdapterResult[TrademarkAssessment]: ...


class SalesSource(Protocol):
    async def fetch(self, key: DomainKey, limit: int) -> AdapterResult[list[ComparableSale]]: ...


async def with_fallback(
    timeout: float,
    primary: Callable[[], Awaitable[AdapterResult[T]]],
    fallback: Callable[[AdapterFailure], T],
    logger: Optional[AuditLogger] = None,
    component: str = "adapter",
) -> FallbackOutcome[T]:
    """
    Run an adapter call under a time budget, falling back on any failure.

    Args:
        timeout: Seconds the primary call may take
        primary: Zero-argument coroutine factory returning an AdapterResult
        fallback: Builds the substitute value from the failure reason
        logger: Optional logger for failure reporting
        component: Component name used in log entries

    Returns:
        FallbackOutcome carrying the value actually used
    """
    try:
        result = await asyncio.wait_for(primary(), timeout=timeout)
    except asyncio.TimeoutError:
        result = AdapterResult.fail(
            AdapterErrorCode.TIMEOUT, f"No response within {timeout:g}s"
        )
    except asyncio.CancelledError:
        raise
    except Exception as e:
        result = AdapterResult.fail(
            AdapterErrorCode.UPSTREAM_ERROR, f"{type(e).__name__}: {e}"
        )

    if result.ok:
        return FallbackOutcome(value=result.value, used_fallback=False)

    failure = result.failure
    if logger is not None:
        data = {"error_code": failure.code.value, "reason": failure.message}
        if failure.is_config_error:
            logger.info(component, "Adapter not configured, using fallback", data)
        else:
            logger.warn(component, "Adapter failed, using fallback", data)

    return FallbackOutcome(value=fallback(failure), used_fallback=True, failure=failure)
