"""
Valuation engine.

Combines nine weighted factor scores with legal, availability and premium
multipliers into a final 0-100 score, then maps that score to a price
estimate blended with comparable sales. Adapter-backed factors run
concurrently and each falls back to a documented conservative estimate, so a
missing or failing integration never fails the evaluation.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from .audit_logger import AuditLogger
from .comparables import ComparableMatcher
from .config import DEFAULT_WEIGHTS, PREMIUM_SHORT_WEIGHTS, FactorWeights
from .domain_validator import DomainValidator
from .enums import AdapterErrorCode, DataSource, Factor
from .fallback import (
    AdapterResult,
    BrandabilityAssessment,
    BrandabilitySource,
    FallbackOutcome,
    TrademarkSource,
    TrafficSource,
    WhoisSource,
    with_fallback,
)
from .models import (
    Appraisal,
    ComparableSale,
    DomainKey,
    EvaluationOptions,
    FactorScore,
    LegalRisk,
    WhoisSnapshot,
)
from .pricing import (
    comparables_median,
    estimate_price,
    is_premium_short,
    premium_multiplier,
    price_bracket,
)
from .scoring import (
    AGE_FALLBACK_SCORE,
    NEUTRAL_COMPS_SCORE,
    TRAFFIC_FALLBACK_SCORE,
    age_tier,
    heuristic_brandability,
    legal_risk_from_assessment,
    score_comparables_quality,
    score_industry,
    score_keywords,
    score_length,
    score_liquidity,
    score_tld,
    static_legal_risk,
    traffic_tier,
)


COMPONENT = "valuation"

SKIPPED_WHOIS_AVAILABILITY = 0.8
AVAILABLE_MULTIPLIER = 1.0
TAKEN_MULTIPLIER = 0.6


@dataclass
class EngineAdapters:
    """External data sources; any of them may be absent."""

    whois: Optional[WhoisSource] = None
    brandability: Optional[BrandabilitySource] = None
    traffic: Optional[TrafficSource] = None
    trademark: Optional[TrademarkSource] = None


@dataclass(frozen=True)
class _Availability:
    multiplier: float
    score: int
    note: str
    source: DataSource


async def _not_configured(name: str) -> AdapterResult:
    return AdapterResult.fail(AdapterErrorCode.CONFIG_MISSING, f"No {name} adapter configured")


class ValuationEngine:
    """Produces Appraisal records; the sole writer of appraisal contents."""

    def __init__(
        self,
        adapters: Optional[EngineAdapters] = None,
        matcher: Optional[ComparableMatcher] = None,
        weights: FactorWeights = DEFAULT_WEIGHTS,
        premium_weights: FactorWeights = PREMIUM_SHORT_WEIGHTS,
        timeout: float = 8.0,
        logger: Optional[AuditLogger] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._adapters = adapters or EngineAdapters()
        self._matcher = matcher or ComparableMatcher(logger=logger, timeout=timeout)
        self._weights = weights
        self._premium_weights = premium_weights
        self._timeout = timeout
        self._logger = logger
        self._clock = clock
        self._validator = DomainValidator()

    @property
    def matcher(self) -> ComparableMatcher:
        return self._matcher

    @property
    def adapters(self) -> EngineAdapters:
        return self._adapters

    def weights_for(self, key: DomainKey) -> FactorWeights:
        return self._premium_weights if is_premium_short(key) else self._weights

    async def evaluate(
        self,
        domain: Union[str, DomainKey],
        options: Optional[EvaluationOptions] = None,
    ) -> Appraisal:
        """
        Evaluate a domain.

        Args:
            domain: Raw domain string or validated key
            options: Evaluation options (defaults apply when None)

        Returns:
            A new immutable Appraisal

        Raises:
            ValidationError: If the domain is malformed
        """
        key = domain if isinstance(domain, DomainKey) else self._validator.require(domain)
        options = options or EvaluationOptions()

        whois, brand, traffic, legal, comps = await asyncio.gather(
            self._lookup_whois(key, options),
            self._assess_brandability(key),
            self._assess_traffic(key, options),
            self._assess_legal(key),
            self._find_comparables(key, options),
        )

        appraisal = self._assemble(key, options, whois, brand, traffic, legal, comps)

        if self._logger is not None:
            self._logger.info(COMPONENT, "Domain evaluated", {
                "domain": key.domain,
                "final_score": appraisal.final_score,
                "bracket": appraisal.bracket,
                "legal_flag": appraisal.legal_flag.value,
            })
        return appraisal

    # ------------------------------------------------------------------
    # Adapter-backed factors
    # ------------------------------------------------------------------

    async def _guarded(self, source, argument, fallback, component: str) -> FallbackOutcome:
        if source is None:
            primary = lambda: _not_configured(component)
        else:
            primary = lambda: source.fetch(argument)
        return await with_fallback(
            self._timeout, primary, fallback, logger=self._logger, component=component
        )

    async def _lookup_whois(
        self, key: DomainKey, options: EvaluationOptions
    ) -> Optional[FallbackOutcome]:
        if options.skip_whois:
            return None
        return await self._guarded(self._adapters.whois, key.domain, lambda failure: None, "whois")

    async def _assess_brandability(self, key: DomainKey) -> FallbackOutcome:
        def fallback(failure) -> BrandabilityAssessment:
            score, commentary = heuristic_brandability(key)
            return BrandabilityAssessment(score=score, commentary=commentary)

        return await self._guarded(self._adapters.brandability, key.domain, fallback, "brandability")

    async def _assess_traffic(
        self, key: DomainKey, options: EvaluationOptions
    ) -> Optional[FallbackOutcome]:
        if options.user_traffic:
            return None
        return await self._guarded(self._adapters.traffic, key.domain, lambda failure: None, "traffic")

    async def _assess_legal(self, key: DomainKey) -> LegalRisk:
        outcome = await self._guarded(
            self._adapters.trademark, key.name, lambda failure: None, "trademark"
        )
        assessment = outcome.value
        if assessment is not None and assessment.has_conflict:
            return legal_risk_from_assessment(assessment.severity, assessment.explanation)
        return static_legal_risk(key.name)

    async def _find_comparables(
        self, key: DomainKey, options: EvaluationOptions
    ) -> list[ComparableSale]:
        if not options.use_comps:
            return []
        return await self._matcher.find_comparables(key)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _age_factor(
        self, options: EvaluationOptions, whois: Optional[FallbackOutcome]
    ) -> tuple[int, str, DataSource]:
        if options.domain_age is not None:
            return age_tier(options.domain_age), f"{options.domain_age:g} years (provided)", DataSource.USER_PROVIDED
        if options.skip_whois:
            return AGE_FALLBACK_SCORE, "WHOIS lookup deferred", DataSource.ESTIMATED
        snapshot: Optional[WhoisSnapshot] = whois.value if whois else None
        if snapshot is not None and snapshot.age_years is not None:
            return age_tier(snapshot.age_years), f"{snapshot.age_years:g} years", DataSource.WHOIS
        if snapshot is not None:
            return AGE_FALLBACK_SCORE, "No registration date on record", DataSource.FALLBACK
        return AGE_FALLBACK_SCORE, "WHOIS data unavailable", DataSource.FALLBACK

    def _traffic_factor(
        self, options: EvaluationOptions, traffic: Optional[FallbackOutcome]
    ) -> tuple[int, str, DataSource]:
        if options.user_traffic:
            return traffic_tier(options.user_traffic), f"{options.user_traffic:,} visits/month (provided)", DataSource.USER_PROVIDED
        estimate = traffic.value if traffic else None
        if estimate is not None:
            return traffic_tier(estimate.monthly_traffic), f"~{estimate.monthly_traffic:,} visits/month", DataSource.AI_ESTIMATE
        return TRAFFIC_FALLBACK_SCORE, "Traffic estimate unavailable", DataSource.FALLBACK

    def _availability(
        self, options: EvaluationOptions, whois: Optional[FallbackOutcome]
    ) -> _Availability:
        if options.skip_whois:
            return _Availability(
                SKIPPED_WHOIS_AVAILABILITY, 80,
                f"ESTIMATED: Acts as {SKIPPED_WHOIS_AVAILABILITY}x multiplier", DataSource.ESTIMATED,
            )
        snapshot: Optional[WhoisSnapshot] = whois.value if whois else None
        if snapshot is None:
            return _Availability(
                TAKEN_MULTIPLIER, 60,
                f"UNKNOWN: Assumed taken, acts as {TAKEN_MULTIPLIER}x multiplier", DataSource.FALLBACK,
            )
        if snapshot.is_available:
            return _Availability(
                AVAILABLE_MULTIPLIER, 100,
                f"AVAILABLE: Acts as {AVAILABLE_MULTIPLIER}x multiplier", DataSource.WHOIS,
            )
        return _Availability(
            TAKEN_MULTIPLIER, 60,
            f"TAKEN: Acts as {TAKEN_MULTIPLIER}x multiplier", DataSource.WHOIS,
        )

    def _assemble(
        self,
        key: DomainKey,
        options: EvaluationOptions,
        whois: Optional[FallbackOutcome],
        brand: FallbackOutcome,
        traffic: Optional[FallbackOutcome],
        legal: LegalRisk,
        comps: list[ComparableSale],
    ) -> Appraisal:
        weights = self.weights_for(key)
        keywords = score_keywords(key)
        age_score, age_note, age_source = self._age_factor(options, whois)
        traffic_score, traffic_note, traffic_source = self._traffic_factor(options, traffic)
        availability = self._availability(options, whois)

        if options.use_comps:
            comps_score = score_comparables_quality(comps)
            comps_note = f"{len(comps)} comparable sales"
            comps_source = DataSource.COMPUTED
        else:
            comps_score = NEUTRAL_COMPS_SCORE
            comps_note = "Comparable sales disabled"
            comps_source = DataSource.ESTIMATED

        assessment: BrandabilityAssessment = brand.value
        keyword_note = ", ".join(keywords.keywords) if keywords.keywords else "no industry keywords"

        breakdown = (
            FactorScore.build(Factor.LENGTH.value, score_length(key), weights.length,
                              f"{len(key.name)} characters", DataSource.COMPUTED),
            FactorScore.build(Factor.KEYWORDS.value, keywords.score, weights.keywords,
                              keyword_note, DataSource.COMPUTED),
            FactorScore.build(Factor.TLD.value, score_tld(key, options.country), weights.tld,
                              f".{key.tld}", DataSource.COMPUTED),
            FactorScore.build(Factor.BRANDABILITY.value, assessment.score, weights.brandability,
                              None, DataSource.HEURISTIC if brand.used_fallback else DataSource.AI_ESTIMATE),
            FactorScore.build(Factor.INDUSTRY.value, score_industry(keywords.industry, keywords.keywords),
                              weights.industry, keywords.industry, DataSource.COMPUTED),
            FactorScore.build(Factor.COMPS.value, comps_score, weights.comps, comps_note, comps_source),
            FactorScore.build(Factor.AGE.value, age_score, weights.age, age_note, age_source),
            FactorScore.build(Factor.TRAFFIC.value, traffic_score, weights.traffic, traffic_note, traffic_source),
            FactorScore.build(Factor.LIQUIDITY.value, score_liquidity(key), weights.liquidity,
                              None, DataSource.COMPUTED),
            FactorScore.build(Factor.LEGAL.value, legal.score, 0.0,
                              f"{legal.flag.value.upper()}: Acts as {legal.multiplier}x multiplier",
                              legal.source),
            FactorScore.build(Factor.AVAILABILITY.value, availability.score, 0.0,
                              availability.note, availability.source),
        )

        raw_score = sum(entry.contribution for entry in breakdown)
        final_score = raw_score * legal.multiplier * availability.multiplier * premium_multiplier(key)
        final_score = round(max(0.0, min(100.0, final_score)), 2)

        median = comparables_median(comps)
        return Appraisal(
            domain=key.domain,
            final_score=final_score,
            bracket=price_bracket(final_score, key).label,
            price_estimate=estimate_price(final_score, key, median),
            breakdown=breakdown,
            legal_flag=legal.flag,
            commentary=assessment.commentary,
            comparables=tuple(comps),
            created_at=datetime.fromtimestamp(self._clock(), timezone.utc).isoformat(),
            whois=whois.value if whois else None,
            options_hash=options.fingerprint(),
        )
