"""
Tests for the HTTP-backed adapters.

All traffic goes through httpx.MockTransport; no real network calls are made.
"""

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.commentary_client import (
    BrandabilityAdapter,
    ChatCompletionClient,
    TrademarkAdapter,
    TrafficAdapter,
)
from domain_appraiser.enums import AdapterErrorCode, LegalFlag
from domain_appraiser.models import DomainKey
from domain_appraiser.sales_client import NameBioAdapter
from domain_appraiser.whois_client import WhoisAdapter, age_in_years


FIXED_NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_handler(payload, status: int = 200, seen: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)
    return handler


def completion(answer: dict) -> dict:
    return {"choices": [{"message": {"content": json.dumps(answer)}}]}


class TestCredentialGatingProperty:
    """Unconfigured adapters fail fast without touching the network."""

    @given(api_key=st.one_of(
        st.none(),
        st.just(""),
        st.just("   "),
        st.just("your_api_key_here"),
        st.just("YOUR_KEY"),
    ))
    @settings(max_examples=20)
    def test_placeholder_credentials_never_call_out(self, api_key) -> None:
        """*For any* absent or placeholder credential, fetch SHALL fail with config_missing."""
        seen = []
        adapter = WhoisAdapter(api_key, client=mock_client(json_handler({}, seen=seen)))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == AdapterErrorCode.CONFIG_MISSING
        assert seen == []
        assert not adapter.configured


class TestHTTPErrorMapping:

    @pytest.mark.parametrize("status,code", [
        (401, AdapterErrorCode.CONFIG_INVALID),
        (403, AdapterErrorCode.CONFIG_INVALID),
        (429, AdapterErrorCode.UPSTREAM_ERROR),
        (500, AdapterErrorCode.UPSTREAM_ERROR),
    ])
    def test_status_codes(self, status: int, code: AdapterErrorCode) -> None:
        adapter = WhoisAdapter("real-key", client=mock_client(json_handler({}, status=status)))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == code
        assert "real-key" not in result.failure.message

    def test_malformed_json(self) -> None:
        def handler(request):
            return httpx.Response(200, content=b"<html>not json</html>")

        adapter = WhoisAdapter("real-key", client=mock_client(handler))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == AdapterErrorCode.PARSE_ERROR

    def test_transport_timeout(self) -> None:
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        adapter = WhoisAdapter("real-key", client=mock_client(handler))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == AdapterErrorCode.TIMEOUT

    def test_transport_error_hides_url(self) -> None:
        def handler(request):
            raise httpx.ConnectError(f"cannot reach {request.url}", request=request)

        adapter = WhoisAdapter("secret-key", client=mock_client(handler))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == AdapterErrorCode.UPSTREAM_ERROR
        assert "secret-key" not in result.failure.message


class TestWhoisAdapter:

    def test_registered_domain_payload(self) -> None:
        seen = []
        payload = {
            "domain": "example.com",
            "create_date": "2010-06-01T00:00:00Z",
            "expire_date": "2030-06-01T00:00:00Z",
            "update_date": "2024-01-15T00:00:00Z",
            "registrar": {"name": "Example Registrar"},
            "nameservers": ["ns1.example.com", "ns2.example.com"],
            "status": ["clientTransferProhibited", "clientDeleteProhibited"],
        }
        adapter = WhoisAdapter(
            "real-key",
            client=mock_client(json_handler(payload, seen=seen)),
            now=lambda: FIXED_NOW,
        )

        result = asyncio.run(adapter.fetch("example.com"))
        snapshot = result.value

        assert result.ok
        assert not snapshot.is_available
        assert snapshot.registrar == "Example Registrar"
        assert snapshot.name_servers == ("ns1.example.com", "ns2.example.com")
        assert snapshot.status == "clientTransferProhibited"
        assert snapshot.age_years == 14.0
        assert seen[0].url.params["domain"] == "example.com"

    def test_unregistered_domain_is_available(self) -> None:
        adapter = WhoisAdapter("real-key", client=mock_client(json_handler({"domain": ""})))

        snapshot = asyncio.run(adapter.fetch("fresh-name.com")).value

        assert snapshot.is_available
        assert snapshot.age_years is None
        assert snapshot.domain == "fresh-name.com"

    def test_string_status(self) -> None:
        payload = {"domain": "example.com", "status": "active"}
        adapter = WhoisAdapter("real-key", client=mock_client(json_handler(payload)))

        assert asyncio.run(adapter.fetch("example.com")).value.status == "active"

    def test_non_object_payload(self) -> None:
        adapter = WhoisAdapter("real-key", client=mock_client(json_handler([1, 2])))

        result = asyncio.run(adapter.fetch("example.com"))

        assert result.failure.code == AdapterErrorCode.PARSE_ERROR

    def test_age_rounds_down_to_tenths(self) -> None:
        created = datetime(2023, 6, 1, tzinfo=timezone.utc)

        assert age_in_years(created, FIXED_NOW) == 1.0
        assert age_in_years(FIXED_NOW, created) == 0.0


class TestChatCompletionAdapters:

    def test_brandability_answer_is_clamped(self) -> None:
        seen = []
        client = ChatCompletionClient(
            "real-key",
            client=mock_client(json_handler(completion({"score": 140, "commentary": "Catchy."}), seen=seen)),
        )

        result = asyncio.run(BrandabilityAdapter(client).fetch("zap.com"))

        assert result.value.score == 100
        assert result.value.commentary == "Catchy."
        assert seen[0].headers["authorization"] == "Bearer real-key"
        body = json.loads(seen[0].content)
        assert body["response_format"] == {"type": "json_object"}
        assert "zap.com" in body["messages"][1]["content"]

    def test_traffic_answer(self) -> None:
        client = ChatCompletionClient(
            "real-key",
            client=mock_client(json_handler(completion({"monthlyTraffic": 2500.4, "explanation": "ok"}))),
        )

        result = asyncio.run(TrafficAdapter(client).fetch("zap.com"))

        assert result.value.monthly_traffic == 2500

    def test_trademark_answer(self) -> None:
        client = ChatCompletionClient(
            "real-key",
            client=mock_client(json_handler(completion({
                "hasConflict": True, "severity": "Warning", "explanation": "close to a brand",
            }))),
        )

        result = asyncio.run(TrademarkAdapter(client).fetch("gogle"))

        assert result.value.has_conflict
        assert result.value.severity == LegalFlag.WARNING

    def test_unknown_severity_is_parse_error(self) -> None:
        client = ChatCompletionClient(
            "real-key",
            client=mock_client(json_handler(completion({"hasConflict": True, "severity": "extreme"}))),
        )

        result = asyncio.run(TrademarkAdapter(client).fetch("gogle"))

        assert result.failure.code == AdapterErrorCode.PARSE_ERROR

    def test_missing_content_is_parse_error(self) -> None:
        client = ChatCompletionClient("real-key", client=mock_client(json_handler({"choices": []})))

        result = asyncio.run(BrandabilityAdapter(client).fetch("zap.com"))

        assert result.failure.code == AdapterErrorCode.PARSE_ERROR


class TestNameBioAdapter:

    def test_results_are_parsed(self) -> None:
        seen = []
        payload = {"results": [
            {"domain": "Zap.com", "price": 35000, "date": "2023-03-01", "source": "Sedo"},
            {"domain": "bad.com", "price": "n/a"},
            {"domain": "", "price": 100},
            "garbage",
        ]}
        adapter = NameBioAdapter("real-key", client=mock_client(json_handler(payload, seen=seen)))

        result = asyncio.run(adapter.fetch(DomainKey("zip", "com"), 6))

        assert [sale.domain for sale in result.value] == ["zap.com"]
        assert result.value[0].source == "Sedo"
        assert json.loads(seen[0].content)["query"]["limit"] == 6

    def test_missing_results_list(self) -> None:
        adapter = NameBioAdapter("real-key", client=mock_client(json_handler({"error": "x"})))

        result = asyncio.run(adapter.fetch(DomainKey("zip", "com"), 6))

        assert result.failure.code == AdapterErrorCode.PARSE_ERROR
