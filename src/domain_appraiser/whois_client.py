"""
WHOIS adapter backed by the IP2WHOIS v2 JSON API.

Maps the provider payload onto a WhoisSnapshot. A payload without a
registered domain object means the name is available.
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx

from .enums import AdapterErrorCode
from .fallback import AdapterResult
from .http_adapter import JSONAPIAdapter
from .models import WhoisSnapshot


DAYS_PER_YEAR = 365.25


def _parse_date(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.strptime(text[:10], "%Y-%m-%d")
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def age_in_years(created: datetime, now: datetime) -> float:
    """Whole-tenths age, rounded down."""
    years = (now - created).total_seconds() / (DAYS_PER_YEAR * 86400)
    return max(0.0, math.floor(years * 10) / 10)


class WhoisAdapter(JSONAPIAdapter):
    """Fetches registration data for a domain."""

    name = "ip2whois"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.ip2whois.com/v2",
        timeout: float = 8.0,
        client: Optional[httpx.AsyncClient] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, client=client)
        self._now = now

    async def fetch(self, domain: str) -> AdapterResult[WhoisSnapshot]:
        result = await self._request_json(
            "GET", "", params={"key": self._api_key, "domain": domain}
        )
        if not result.ok:
            return result

        payload = result.value
        if not isinstance(payload, dict):
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, "WHOIS payload is not an object"
            )
        return AdapterResult.success(self._parse(domain, payload))

    def _parse(self, domain: str, payload: dict) -> WhoisSnapshot:
        created = _parse_date(payload.get("create_date"))
        registrar = payload.get("registrar")
        status = payload.get("status")
        if isinstance(status, list):
            status = status[0] if status else None
        nameservers = payload.get("nameservers") or []

        return WhoisSnapshot(
            domain=domain,
            is_available=not payload.get("domain"),
            registration_date=payload.get("create_date") or None,
            expiration_date=payload.get("expire_date") or None,
            registrar=registrar.get("name") if isinstance(registrar, dict) else None,
            name_servers=tuple(str(ns) for ns in nameservers if ns),
            status=status,
            last_updated=payload.get("update_date") or None,
            age_years=age_in_years(created, self._now()) if created else None,
        )
