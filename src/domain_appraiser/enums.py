"""
Enumeration types for the domain appraiser.

These enums provide type-safe constants for factor names, data-source labels,
error codes and request states used throughout the system.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels, ordered from least to most severe."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARN: 30,
    LogLevel.ERROR: 40,
}


class Factor(Enum):
    """Factors reported in an appraisal breakdown, in display order."""

    LENGTH = "length"
    KEYWORDS = "keywords"
    TLD = "tld"
    BRANDABILITY = "brandability"
    INDUSTRY = "industry"
    COMPS = "comps"
    AGE = "age"
    TRAFFIC = "traffic"
    LIQUIDITY = "liquidity"
    LEGAL = "legal"
    AVAILABILITY = "availability"


class DataSource(Enum):
    """Where a factor score came from."""

    COMPUTED = "computed"
    USER_PROVIDED = "user_provided"
    WHOIS = "whois"
    AI_ESTIMATE = "ai_estimate"
    STATIC = "static"
    HEURISTIC = "heuristic"
    ESTIMATED = "estimated"
    FALLBACK = "fallback"


class LegalFlag(Enum):
    """Trademark risk classification."""

    CLEAR = "clear"
    WARNING = "warning"
    SEVERE = "severe"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    INVALID_FORMAT = "invalid_format"


class AdapterErrorCode(Enum):
    """Error codes for external data adapter failures."""

    CONFIG_MISSING = "config_missing"
    CONFIG_INVALID = "config_invalid"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    PARSE_ERROR = "parse_error"


class RequestState(Enum):
    """Lifecycle states of a single appraisal request."""

    RECEIVED = "received"
    RATE_CHECKED = "rate_checked"
    CACHE_CHECKED = "cache_checked"
    CACHE_HIT = "cache_hit"
    SCORING = "scoring"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class ResultSource(Enum):
    """Where the appraisal returned to the caller came from."""

    FRESH = "fresh"
    CACHE = "cache"
    STORE = "store"
