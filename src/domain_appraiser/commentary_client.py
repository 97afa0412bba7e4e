"""
Chat-completion backed estimators.

Brandability commentary, traffic estimation and trademark screening all go
through one xAI-compatible /chat/completions endpoint that is asked to answer
with a JSON object.
"""

import json
from typing import Any, Optional

import httpx

from .enums import AdapterErrorCode, LegalFlag
from .fallback import (
    AdapterResult,
    BrandabilityAssessment,
    TrademarkAssessment,
    TrafficEstimate,
)
from .http_adapter import JSONAPIAdapter


BRANDABILITY_PROMPT = """You are a domain branding expert. Analyze the brandability of domain names based on:
- Pronounceability (how easy it is to say)
- Memorability (how easy it is to remember)
- Uniqueness (how distinctive it is)
- Commercial appeal (how suitable for business use)

Provide a score from 0-100 and a brief 2-3 sentence explanation.
Respond with JSON in this format: { "score": number, "commentary": "explanation" }"""

TRAFFIC_PROMPT = """You are a web traffic analysis expert. Estimate monthly traffic for domain names based on
domain length and memorability, industry keywords, TLD authority and brand recognition potential.

Most domains get 0-1000 visits/month; established brandable domains 1000-10000;
strong keyword domains 5000-50000; premium domains with existing traffic 50000+.

Respond with JSON in this format: { "monthlyTraffic": number, "explanation": "reasoning" }"""

TRADEMARK_PROMPT = """You are a trademark analysis expert. Assess trademark risk for domain names based on
known major brand names, common trademark patterns and variations, and generic vs brandable terms.

Risk levels:
- "severe": Direct match with known major brands or clear trademark infringement
- "warning": Similar to known brands or could cause confusion
- "clear": No obvious trademark conflicts

Respond with JSON in this format: { "hasConflict": boolean, "severity": "clear|warning|severe", "explanation": "reasoning" }"""


class ChatCompletionClient(JSONAPIAdapter):
    """Sends a system/user prompt pair and decodes the JSON answer."""

    name = "xai"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.x.ai/v1",
        model: str = "grok-2-1212",
        timeout: float = 8.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, client=client)
        self._model = model

    async def complete_json(self, system: str, user: str) -> AdapterResult[dict]:
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "response_format": {"type": "json_object"},
        }
        result = await self._request_json(
            "POST",
            "/chat/completions",
            json_body=body,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        if not result.ok:
            return result

        try:
            content = result.value["choices"][0]["message"]["content"]
            answer = json.loads(content or "{}")
        except (KeyError, IndexError, TypeError, json.JSONDecodeError):
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, "Completion did not contain a JSON answer"
            )
        if not isinstance(answer, dict):
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, "Completion answer is not an object"
            )
        return AdapterResult.success(answer)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class BrandabilityAdapter:
    """Brandability score and commentary from a chat completion."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    async def fetch(self, domain: str) -> AdapterResult[BrandabilityAssessment]:
        result = await self._client.complete_json(
            BRANDABILITY_PROMPT, f"Analyze the brandability of this domain: {domain}"
        )
        if not result.ok:
            return result
        score = round(_number(result.value.get("score"), 0))
        return AdapterResult.success(BrandabilityAssessment(
            score=max(0, min(100, score)),
            commentary=result.value.get("commentary") or "Unable to analyze brandability at this time.",
        ))


class TrafficAdapter:
    """Monthly traffic estimate from a chat completion."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    async def fetch(self, domain: str) -> AdapterResult[TrafficEstimate]:
        result = await self._client.complete_json(
            TRAFFIC_PROMPT, f"Estimate monthly traffic potential for this domain: {domain}"
        )
        if not result.ok:
            return result
        visits = round(_number(result.value.get("monthlyTraffic"), 100))
        return AdapterResult.success(TrafficEstimate(
            monthly_traffic=max(0, visits),
            explanation=result.value.get("explanation") or "",
        ))


class TrademarkAdapter:
    """Trademark conflict screening from a chat completion."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    async def fetch(self, name: str) -> AdapterResult[TrademarkAssessment]:
        result = await self._client.complete_json(
            TRADEMARK_PROMPT, f"Analyze trademark risk for this domain name: {name}"
        )
        if not result.ok:
            return result
        try:
            severity = LegalFlag(str(result.value.get("severity") or "clear").lower())
        except ValueError:
            return AdapterResult.fail(
                AdapterErrorCode.PARSE_ERROR, "Unknown trademark severity"
            )
        return AdapterResult.success(TrademarkAssessment(
            has_conflict=bool(result.value.get("hasConflict")),
            severity=severity,
            explanation=result.value.get("explanation") or "",
        ))
