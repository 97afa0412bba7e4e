"""
NameBio sales search adapter.
"""

from typing import Optional

import httpx

from .enums import AdapterErrorCode
from .fallback import AdapterResult
from .http_adapter import JSONAPIAdapter
from .models import ComparableSale, DomainKey


class NameBioAdapter(JSONAPIAdapter):
    """Searches recorded sales of names similar to a target."""

    name = "namebio"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.namebio.com",
        timeout: float = 8.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, client=client)

    async def fetch(self, key: DomainKey, limit: int) -> AdapterResult[list[ComparableSale]]:
        body = {
            "query": {
                "domain_name": key.domain,
                "similar_names": True,
                "min_price": 100,
                "tld": key.tld,
                "limit": limit,
            }
        }
        result = await self._request_json(
            "POST",
            "/sales/search",
            json_body=body,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        if not result.ok:
            return result

        rows = result.value.get("results") if isinstance(result.value, dict) else None
        if not isinstance(rows, list):
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, "Sales search payload has no results list"
            )

        sales = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                price = int(row.get("price") or 0)
            except (TypeError, ValueError):
                continue
            domain = str(row.get("domain") or "").lower()
            if not domain or price <= 0:
                continue
            sales.append(ComparableSale(
                domain=domain,
                sold_price=price,
                sold_date=str(row.get("date") or ""),
                source=row.get("source") or "NameBio",
            ))
        return AdapterResult.success(sales)
