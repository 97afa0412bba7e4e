"""
Appraisal Service for the domain appraiser.

This module provides the request-level orchestration that coordinates all
components to answer one appraisal request. It integrates:
- Per-client rate limiting
- Domain validation and option parsing
- Result cache lookup with single-flight deduplication
- Recent-record lookup in the appraisal store
- The valuation engine
- Persistence and cache population
- Deferred WHOIS augmentation
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .audit_logger import AuditLogger
from .background import WhoisAugmentationWorker, WhoisPatchJob
from .commentary_client import (
    BrandabilityAdapter,
    ChatCompletionClient,
    TrademarkAdapter,
    TrafficAdapter,
)
from .comparables import ComparableMatcher, InMemorySalesRepository
from .config import SystemConfig
from .domain_validator import DomainValidator
from .enums import RequestState, ResultSource
from .exceptions import PersistenceError
from .kv_store import InMemoryStore, KeyValueStore
from .models import Appraisal, ComparableSale, EvaluationOptions
from .rate_limiter import RateLimiter, RateLimitStatus
from .result_cache import ResultCache
from .sales_client import NameBioAdapter
from .sales_data import SAMPLE_SALES, load_sales_tsv
from .state_store import AppraisalStore
from .valuation import EngineAdapters, ValuationEngine
from .whois_client import WhoisAdapter


COMPONENT = "AppraisalService"

OptionsInput = Union[EvaluationOptions, dict, None]


@dataclass
class AppraisalResponse:
    """Result of an orchestrated appraisal request."""

    appraisal: Appraisal
    source: ResultSource
    rate_limit: RateLimitStatus
    states: list[RequestState] = field(default_factory=list)
    record_id: Optional[int] = None

    @property
    def cached(self) -> bool:
        return self.source != ResultSource.FRESH

    def to_dict(self) -> dict:
        return {
            "appraisal": self.appraisal.to_dict(),
            "source": self.source.value,
            "cached": self.cached,
            "rate_limit": self.rate_limit.to_dict(),
            "record_id": self.record_id,
        }


class AppraisalService:
    """
    Main entry point for appraisal requests.

    Each request moves through received, rate_checked, cache_checked and
    then either cache_hit or scoring and persisting, ending in done. Any
    error moves it to failed and is re-raised to the caller.
    """

    def __init__(
        self,
        engine: ValuationEngine,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResultCache] = None,
        store: Optional[AppraisalStore] = None,
        whois_worker: Optional[WhoisAugmentationWorker] = None,
        logger: Optional[AuditLogger] = None,
        clock: Callable[[], float] = time.time,
        closables: Optional[list] = None,
    ) -> None:
        """
        Initialize the appraisal service.

        Args:
            engine: Valuation engine that produces appraisals
            rate_limiter: Per-client limiter (defaults to the standard ceiling)
            cache: Result cache (defaults to an in-memory cache)
            store: Optional appraisal store for persistence
            whois_worker: Optional worker for deferred WHOIS lookups
            logger: Optional audit logger
            clock: Time source in epoch seconds
            closables: Adapters to close when the service is closed
        """
        self._engine = engine
        self._clock = clock
        kv: KeyValueStore = InMemoryStore(clock=clock)
        self._rate_limiter = rate_limiter or RateLimiter(store=kv, clock=clock)
        self._cache = cache or ResultCache(kv, clock=clock)
        self._store = store
        self._whois_worker = whois_worker
        self._logger = logger
        self._closables = closables or []
        self._validator = DomainValidator()

    async def __aenter__(self) -> "AppraisalService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        logger: Optional[AuditLogger] = None,
        clock: Callable[[], float] = time.time,
    ) -> "AppraisalService":
        """
        Wire the service and its adapters from configuration.

        Raises:
            PersistenceError: If the configured sales dataset cannot be read
        """
        adapter_config = config.adapters
        timeout = adapter_config.timeout_seconds

        whois = WhoisAdapter(
            adapter_config.whois_api_key,
            base_url=adapter_config.whois_base_url,
            timeout=timeout,
        )
        chat = ChatCompletionClient(
            adapter_config.xai_api_key,
            base_url=adapter_config.xai_base_url,
            model=adapter_config.xai_model,
            timeout=timeout,
        )
        sales = NameBioAdapter(
            adapter_config.namebio_api_key,
            base_url=adapter_config.namebio_base_url,
            timeout=timeout,
        )

        repository = InMemorySalesRepository(SAMPLE_SALES, min_sale_date=config.comparables.min_sale_date)
        if config.comparables.dataset_path is not None:
            repository.extend(load_sales_tsv(config.comparables.dataset_path))

        matcher = ComparableMatcher(
            repository=repository,
            remote=sales,
            config=config.comparables,
            logger=logger,
            timeout=timeout,
        )
        engine = ValuationEngine(
            adapters=EngineAdapters(
                whois=whois,
                brandability=BrandabilityAdapter(chat),
                traffic=TrafficAdapter(chat),
                trademark=TrademarkAdapter(chat),
            ),
            matcher=matcher,
            weights=config.weights,
            premium_weights=config.premium_weights,
            timeout=timeout,
            logger=logger,
            clock=clock,
        )

        kv = InMemoryStore(clock=clock)
        cache = ResultCache(kv, freshness_seconds=config.cache.freshness_seconds, clock=clock)
        store = AppraisalStore(
            config.persistence.state_file_path,
            config.persistence.hmac_secret,
            clock=clock,
            retention_seconds=config.cache.freshness_seconds,
            max_records=config.persistence.max_records,
        )
        worker = WhoisAugmentationWorker(
            whois,
            store=store,
            cache=cache,
            retry_config=config.retry,
            logger=logger,
            timeout=timeout,
        )

        return cls(
            engine=engine,
            rate_limiter=RateLimiter(config.rate_limits, store=kv, clock=clock),
            cache=cache,
            store=store,
            whois_worker=worker,
            logger=logger,
            clock=clock,
            closables=[whois, chat, sales],
        )

    @property
    def engine(self) -> ValuationEngine:
        return self._engine

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def whois_worker(self) -> Optional[WhoisAugmentationWorker]:
        return self._whois_worker

    async def appraise(
        self,
        domain: str,
        options: OptionsInput = None,
        client_id: str = "anonymous",
    ) -> AppraisalResponse:
        """
        Answer one appraisal request.

        Args:
            domain: Raw domain string
            options: EvaluationOptions, a loosely-typed mapping, or None
            client_id: Identifier the rate limit is counted against

        Returns:
            AppraisalResponse with the appraisal and where it came from

        Raises:
            RateLimitError: If the client has exhausted its window
            ValidationError: If the domain or options are malformed
        """
        states = [RequestState.RECEIVED]
        try:
            rate_status = await self._rate_limiter.enforce(client_id)
            states.append(RequestState.RATE_CHECKED)

            key = self._validator.require(domain)
            if not isinstance(options, EvaluationOptions):
                options = EvaluationOptions.from_dict(options)
            options_hash = options.fingerprint()

            async with self._cache.lock(key.domain, options_hash):
                entry = await self._cache.get(key.domain, options_hash)
                states.append(RequestState.CACHE_CHECKED)
                if entry is not None:
                    states.extend([RequestState.CACHE_HIT, RequestState.DONE])
                    self._log_info("Serving cached appraisal", {"domain": key.domain, "client_id": client_id})
                    return AppraisalResponse(entry.appraisal, ResultSource.CACHE, rate_status, states)

                stored = self._find_stored(key.domain, options_hash)
                if stored is not None:
                    await self._cache.put(stored.appraisal, created_at=stored.created_at)
                    states.extend([RequestState.CACHE_HIT, RequestState.DONE])
                    self._log_info("Serving stored appraisal", {
                        "domain": key.domain,
                        "record_id": stored.record_id,
                    })
                    return AppraisalResponse(
                        stored.appraisal, ResultSource.STORE, rate_status, states, stored.record_id
                    )

                states.append(RequestState.SCORING)
                appraisal = await self._engine.evaluate(key, options)

                states.append(RequestState.PERSISTING)
                record_id = self._persist(appraisal)
                await self._cache.put(appraisal)

            if options.skip_whois and self._whois_worker is not None:
                self._whois_worker.submit(WhoisPatchJob(record_id, key.domain, options_hash))

            states.append(RequestState.DONE)
            return AppraisalResponse(appraisal, ResultSource.FRESH, rate_status, states, record_id)

        except Exception as e:
            states.append(RequestState.FAILED)
            if self._logger is not None:
                self._logger.log_error(COMPONENT, "Appraisal request failed", e, {
                    "domain": domain,
                    "client_id": client_id,
                    "states": [state.value for state in states],
                })
            raise

    async def find_comparables(self, domain: str, limit: Optional[int] = None) -> list[ComparableSale]:
        """
        Comparable sales for a domain, without scoring it.

        Raises:
            ValidationError: If the domain is malformed
        """
        return await self._engine.matcher.find_comparables(domain, limit)

    async def aclose(self) -> None:
        if self._whois_worker is not None:
            await self._whois_worker.stop()
        for closable in self._closables:
            await closable.aclose()

    def _find_stored(self, domain: str, options_hash: str):
        if self._store is None:
            return None
        try:
            return self._store.find_recent(domain, options_hash, self._cache.freshness_seconds)
        except PersistenceError as e:
            if self._logger is not None:
                self._logger.log_error(COMPONENT, "Appraisal store lookup failed", e, {"domain": domain})
            return None

    def _persist(self, appraisal: Appraisal) -> Optional[int]:
        if self._store is None:
            return None
        try:
            return self._store.insert(appraisal)
        except PersistenceError as e:
            if self._logger is not None:
                self._logger.log_error(COMPONENT, "Failed to persist appraisal", e, {"domain": appraisal.domain})
            return None

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger is not None:
            self._logger.info(COMPONENT, message, data)
