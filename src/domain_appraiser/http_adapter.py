"""
Base JSON-over-HTTPS adapter.

Wraps an httpx.AsyncClient and converts every transport or protocol problem
into an AdapterResult failure. Credentials are checked before any network
call and never appear in log entries or failure messages.
"""

import json
from typing import Any, Optional

import httpx

from .config import is_placeholder_credential
from .enums import AdapterErrorCode
from .fallback import AdapterResult


class JSONAPIAdapter:
    """
    Async JSON API client with credential gating.

    Can be used as an async context manager, in which case it owns its
    client. An injected client is never closed by the adapter.
    """

    name = "json_api"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        timeout: float = 8.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            base_url: Service base URL
            api_key: Credential; None, blank or placeholder values count as absent
            timeout: Per-request timeout in seconds
            client: Optional pre-built client (tests inject a MockTransport here)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "JSONAPIAdapter":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def configured(self) -> bool:
        return not is_placeholder_credential(self._api_key)

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    def _missing_credentials(self) -> AdapterResult[Any]:
        return AdapterResult.fail(
            AdapterErrorCode.CONFIG_MISSING,
            f"{self.name} credentials are not configured",
        )

    async def _request_json(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> AdapterResult[Any]:
        """
        Perform one request and decode its JSON body.

        Returns:
            AdapterResult with the decoded payload or a typed failure
        """
        if not self.configured:
            return self._missing_credentials()

        client = self._ensure_client()
        url = f"{self._base_url}{path}"

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.TimeoutException:
            return AdapterResult.fail(
                AdapterErrorCode.TIMEOUT, f"{self.name} request timed out"
            )
        except httpx.HTTPError as e:
            # Exception text may embed the request URL, so only the type is kept
            return AdapterResult.fail(
                AdapterErrorCode.UPSTREAM_ERROR,
                f"{self.name} transport error: {type(e).__name__}",
            )

        if response.status_code in (401, 403):
            return AdapterResult.fail(
                AdapterErrorCode.CONFIG_INVALID,
                f"{self.name} rejected the configured credentials ({response.status_code})",
            )

        if not 200 <= response.status_code < 300:
            return AdapterResult.fail(
                AdapterErrorCode.UPSTREAM_ERROR,
                f"{self.name} returned HTTP {response.status_code}",
            )

        try:
            return AdapterResult.success(response.json())
        except (json.JSONDecodeError, ValueError):
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, f"{self.name} returned malformed JSON"
            )
