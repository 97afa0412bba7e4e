"""
Exception classes for the domain appraiser.

All exceptions inherit from DomainAppraiserError and carry a machine-readable
code, a human-readable message and optional structured details. Only
ValidationError and RateLimitError are ever surfaced to callers; the adapter
errors are raised and caught internally, and PersistenceError is logged.
"""

from typing import Optional


class DomainAppraiserError(Exception):
    """Base exception for all domain appraiser errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainAppraiserError):
    """Raised when a domain or the evaluation options are malformed."""

    pass


class RateLimitError(DomainAppraiserError):
    """Raised when a client exceeds its request ceiling for the current window."""

    @property
    def retry_after_seconds(self) -> int:
        return int(self.details.get("retry_after_seconds", 0))


class AdapterError(DomainAppraiserError):
    """Base class for failures of an external data adapter."""

    pass


class ConfigError(AdapterError):
    """Credentials for an adapter are missing, placeholders or rejected."""

    pass


class AdapterTimeoutError(AdapterError):
    """An adapter did not answer within its time budget."""

    pass


class UpstreamError(AdapterError):
    """An adapter answered with a non-2xx status or an unusable payload."""

    pass


class PersistenceError(DomainAppraiserError):
    """Raised when the appraisal store or the result cache is unavailable."""

    pass


class TamperingError(PersistenceError):
    """Raised when HMAC validation of the appraisal store fails."""

    pass
