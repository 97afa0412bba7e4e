"""
Configuration dataclasses for the domain appraiser.

This module defines the factor weight tables, adapter credentials and
timeouts, rate limiting, cache freshness, comparable matching, background
retry behaviour, persistence and logging configuration. Values can be loaded
from the environment (optionally seeded from a .env file).
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


WEIGHT_SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class FactorWeights:
    """
    Weights for the nine weighted factors.

    Legal risk and availability are gating multipliers and deliberately have
    no weight here.
    """

    length: float
    keywords: float
    tld: float
    brandability: float
    industry: float
    comps: float
    age: float
    traffic: float
    liquidity: float

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"Weight '{f.name}' must be non-negative")
        if self.total() > 1.0 + WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Factor weights sum to {self.total():.4f}, must be <= 1")

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_WEIGHTS = FactorWeights(
    length=0.12,
    keywords=0.20,
    tld=0.15,
    brandability=0.15,
    industry=0.10,
    comps=0.12,
    age=0.06,
    traffic=0.04,
    liquidity=0.06,
)

# Used for premium short names, where length, TLD and liquidity dominate.
PREMIUM_SHORT_WEIGHTS = FactorWeights(
    length=0.25,
    keywords=0.10,
    tld=0.20,
    brandability=0.12,
    industry=0.05,
    comps=0.08,
    age=0.03,
    traffic=0.02,
    liquidity=0.15,
)


@dataclass
class AdapterConfig:
    """Credentials, endpoints and the time budget for external adapters."""

    whois_api_key: Optional[str] = None
    whois_base_url: str = "https://api.ip2whois.com/v2"
    xai_api_key: Optional[str] = None
    xai_base_url: str = "https://api.x.ai/v1"
    xai_model: str = "grok-2-1212"
    namebio_api_key: Optional[str] = None
    namebio_base_url: str = "https://api.namebio.com"
    timeout_seconds: float = 8.0


@dataclass
class RateLimitConfig:
    """Fixed-window request ceiling per client identifier."""

    max_requests: int = 3
    window_seconds: float = 3600.0


@dataclass
class CacheConfig:
    """Freshness window for cached appraisals."""

    freshness_seconds: float = 24 * 60 * 60


@dataclass
class ComparablesConfig:
    """Comparable-sales matching configuration."""

    limit: int = 5
    similarity_floor: int = 40
    candidate_multiplier: int = 3
    min_sale_date: str = "2014-01-01"
    dataset_path: Optional[Path] = None


@dataclass
class RetryConfig:
    """Retry behaviour for the background WHOIS augmentation."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0


@dataclass
class PersistenceConfig:
    """Appraisal store configuration."""

    state_file_path: Optional[Path] = None
    hmac_secret: str = ""
    max_records: int = 10_000


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main configuration combining all sub-configurations."""

    adapters: AdapterConfig = field(default_factory=AdapterConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    comparables: ComparablesConfig = field(default_factory=ComparablesConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    weights: FactorWeights = DEFAULT_WEIGHTS
    premium_weights: FactorWeights = PREMIUM_SHORT_WEIGHTS


def is_placeholder_credential(value: Optional[str]) -> bool:
    """True when a credential is absent, blank or an unfilled template value."""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or "your_" in stripped.lower()


def _str_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env(env_file: Optional[Path] = None) -> SystemConfig:
    """
    Build a SystemConfig from environment variables.

    Args:
        env_file: Optional .env file loaded before reading the environment.
                  Existing environment variables take precedence.

    Returns:
        SystemConfig with defaults for anything unset or malformed
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    adapters = AdapterConfig(
        whois_api_key=_str_env("IP2WHOIS_API_KEY"),
        whois_base_url=_str_env("IP2WHOIS_BASE_URL", AdapterConfig.whois_base_url),
        xai_api_key=_str_env("XAI_API_KEY"),
        xai_base_url=_str_env("XAI_BASE_URL", AdapterConfig.xai_base_url),
        xai_model=_str_env("XAI_MODEL", AdapterConfig.xai_model),
        namebio_api_key=_str_env("NAMEBIO_API_KEY"),
        namebio_base_url=_str_env("NAMEBIO_BASE_URL", AdapterConfig.namebio_base_url),
        timeout_seconds=_float_env("ADAPTER_TIMEOUT_SECONDS", AdapterConfig.timeout_seconds),
    )

    rate_limits = RateLimitConfig(
        max_requests=max(1, _int_env("RATE_LIMIT_MAX_REQUESTS", RateLimitConfig.max_requests)),
        window_seconds=_float_env("RATE_LIMIT_WINDOW_SECONDS", RateLimitConfig.window_seconds),
    )

    cache = CacheConfig(
        freshness_seconds=_float_env("CACHE_FRESHNESS_SECONDS", CacheConfig.freshness_seconds),
    )

    dataset = _str_env("SALES_DATASET_PATH")
    comparables = ComparablesConfig(
        dataset_path=Path(dataset) if dataset else None,
    )

    retry = RetryConfig(
        max_retries=_int_env("WHOIS_PATCH_MAX_RETRIES", RetryConfig.max_retries),
        base_delay_seconds=_float_env("WHOIS_PATCH_BASE_DELAY", RetryConfig.base_delay_seconds),
    )

    state_file = _str_env("APPRAISAL_STATE_FILE")
    persistence = PersistenceConfig(
        state_file_path=Path(state_file) if state_file else None,
        hmac_secret=_str_env("APPRAISAL_HMAC_SECRET", "") or "",
        max_records=max(1, _int_env("APPRAISAL_MAX_RECORDS", PersistenceConfig.max_records)),
    )

    logging_config = LoggingConfig(
        level=(_str_env("LOG_LEVEL", "info") or "info").lower(),
        output_format=(_str_env("LOG_FORMAT", "text") or "text").lower(),
    )

    return SystemConfig(
        adapters=adapters,
        rate_limits=rate_limits,
        cache=cache,
        comparables=comparables,
        retry=retry,
        persistence=persistence,
        logging=logging_config,
    )
