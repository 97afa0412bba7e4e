"""
Domain Appraiser - Multi-factor domain name valuation engine.

This package scores a domain name across weighted factors (length, keywords,
TLD, brandability, industry, comparable sales, age, traffic and liquidity),
gates the result by trademark risk and availability, and maps it to investor
and retail price estimates. Results are cached per options fingerprint and
requests are rate limited per client.
"""

__version__ = "0.1.0"
__author__ = "Domain Appraiser Team"

from domain_appraiser.exceptions import (
    DomainAppraiserError,
    ValidationError,
    RateLimitError,
    AdapterError,
    ConfigError,
    AdapterTimeoutError,
    UpstreamError,
    PersistenceError,
    TamperingError,
)
from domain_appraiser.enums import (
    LogLevel,
    Factor,
    DataSource,
    LegalFlag,
    DomainValidationErrorCode,
    AdapterErrorCode,
    RequestState,
    ResultSource,
)
from domain_appraiser.config import (
    FactorWeights,
    DEFAULT_WEIGHTS,
    PREMIUM_SHORT_WEIGHTS,
    AdapterConfig,
    RateLimitConfig,
    CacheConfig,
    ComparablesConfig,
    RetryConfig,
    PersistenceConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
)
from domain_appraiser.models import (
    DomainKey,
    EvaluationOptions,
    FactorScore,
    ComparableSale,
    LegalRisk,
    WhoisSnapshot,
    PriceEstimate,
    Appraisal,
    CacheEntry,
    RateLimitWindow,
    StoredAppraisal,
)
from domain_appraiser.tld_registry import (
    extract_tld,
    extract_domain_name,
    split_domain,
    is_multi_level_tld,
    tld_score,
)
from domain_appraiser.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_appraiser.fallback import (
    AdapterFailure,
    AdapterResult,
    FallbackOutcome,
    with_fallback,
)
from domain_appraiser.pricing import (
    PriceBracket,
    price_bracket,
    premium_multiplier,
    estimate_price,
)
from domain_appraiser.comparables import (
    ComparableMatcher,
    InMemorySalesRepository,
    SimilarityBreakdown,
)
from domain_appraiser.valuation import (
    EngineAdapters,
    ValuationEngine,
)
from domain_appraiser.kv_store import (
    KeyValueStore,
    InMemoryStore,
)
from domain_appraiser.result_cache import (
    ResultCache,
    CacheStats,
)
from domain_appraiser.rate_limiter import (
    RateLimiter,
    RateLimitStatus,
)
from domain_appraiser.retry_manager import (
    RetryManager,
    RetryResult,
)
from domain_appraiser.state_store import (
    AppraisalStore,
)
from domain_appraiser.background import (
    WhoisAugmentationWorker,
    WhoisPatchJob,
)
from domain_appraiser.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_appraiser.orchestrator import (
    AppraisalService,
    AppraisalResponse,
)

__all__ = [
    # Exceptions
    "DomainAppraiserError",
    "ValidationError",
    "RateLimitError",
    "AdapterError",
    "ConfigError",
    "AdapterTimeoutError",
    "UpstreamError",
    "PersistenceError",
    "TamperingError",
    # Enums
    "LogLevel",
    "Factor",
    "DataSource",
    "LegalFlag",
    "DomainValidationErrorCode",
    "AdapterErrorCode",
    "RequestState",
    "ResultSource",
    # Configuration
    "FactorWeights",
    "DEFAULT_WEIGHTS",
    "PREMIUM_SHORT_WEIGHTS",
    "AdapterConfig",
    "RateLimitConfig",
    "CacheConfig",
    "ComparablesConfig",
    "RetryConfig",
    "PersistenceConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    # Models
    "DomainKey",
    "EvaluationOptions",
    "FactorScore",
    "ComparableSale",
    "LegalRisk",
    "WhoisSnapshot",
    "PriceEstimate",
    "Appraisal",
    "CacheEntry",
    "RateLimitWindow",
    "StoredAppraisal",
    # TLD Registry
    "extract_tld",
    "extract_domain_name",
    "split_domain",
    "is_multi_level_tld",
    "tld_score",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Adapters
    "AdapterFailure",
    "AdapterResult",
    "FallbackOutcome",
    "with_fallback",
    # Pricing
    "PriceBracket",
    "price_bracket",
    "premium_multiplier",
    "estimate_price",
    # Comparables
    "ComparableMatcher",
    "InMemorySalesRepository",
    "SimilarityBreakdown",
    # Valuation
    "EngineAdapters",
    "ValuationEngine",
    # Cache and rate limiting
    "KeyValueStore",
    "InMemoryStore",
    "ResultCache",
    "CacheStats",
    "RateLimiter",
    "RateLimitStatus",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Persistence
    "AppraisalStore",
    "WhoisAugmentationWorker",
    "WhoisPatchJob",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Orchestrator
    "AppraisalService",
    "AppraisalResponse",
]
