"""
Domain validation and normalization module.

Provides domain validation against a permissive hostname grammar, conversion
to canonical form (lowercase, IDNA-encoded) and the split into a DomainKey
that honours multi-level TLDs.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from domain_appraiser.enums import DomainValidationErrorCode
from domain_appraiser.exceptions import ValidationError
from domain_appraiser.models import DomainKey
from domain_appraiser.tld_registry import split_domain


# Forbidden characters in domain names (control chars, spaces, special symbols)
# Valid domain characters: a-z, A-Z, 0-9, hyphen (-), dot (.), and non-ASCII for IDN
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'           # Control characters
    r'\s'                        # Whitespace
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'  # Special symbols not allowed
)

LABEL_PATTERN = re.compile(r'^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$')
FINAL_LABEL_PATTERN = re.compile(r'^(?:[a-z]{2,63}|xn--[a-z0-9-]{1,59})$')

MAX_DOMAIN_LENGTH = 253


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict

    def to_exception(self) -> ValidationError:
        return ValidationError(code=self.code.value, message=self.message, details=self.details)


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    key: Optional[DomainKey]
    error: Optional[DomainValidationError]


def _invalid(code: DomainValidationErrorCode, message: str, details: dict) -> DomainValidationResult:
    return DomainValidationResult(
        valid=False,
        canonical_domain=None,
        key=None,
        error=DomainValidationError(code=code, message=message, details=details),
    )


class DomainValidator:
    """
    Validates and normalizes domain names.

    Handles:
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters
    - Hostname grammar (labels, final label, total length)
    - Splitting into (name, tld) with multi-level TLD support
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not isinstance(raw_domain, str) or not raw_domain.strip():
            return _invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return _invalid(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return _invalid(DomainValidationErrorCode.IDNA_ERROR, e.message, e.details)

        problem = self._grammar_problem(canonical)
        if problem is not None:
            return _invalid(
                DomainValidationErrorCode.INVALID_FORMAT,
                problem,
                {"raw_input": raw_domain, "canonical": canonical},
            )

        key = split_domain(canonical)
        if key is None or not key.name:
            return _invalid(
                DomainValidationErrorCode.INVALID_FORMAT,
                "Domain has no name before its TLD",
                {"raw_input": raw_domain, "canonical": canonical},
            )

        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            key=key,
            error=None,
        )

    def require(self, raw_domain: str) -> DomainKey:
        """
        Validate a domain and return its key.

        Raises:
            ValidationError: If the domain is malformed
        """
        result = self.validate(raw_domain)
        if not result.valid:
            raise result.error.to_exception()
        return result.key

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded, no trailing dot).

        Args:
            domain: Domain string to normalize

        Returns:
            Canonical form of the domain

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()
        if domain_lower.endswith('.'):
            domain_lower = domain_lower[:-1]

        has_non_ascii = any(ord(c) > 127 for c in domain_lower)

        if not has_non_ascii:
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def _grammar_problem(self, canonical: str) -> Optional[str]:
        if len(canonical) > MAX_DOMAIN_LENGTH:
            return f"Domain exceeds {MAX_DOMAIN_LENGTH} characters"

        labels = canonical.split('.')
        if len(labels) < 2:
            return "Domain must have at least two labels"

        for label in labels:
            if not label:
                return "Domain contains an empty label"
            if not LABEL_PATTERN.match(label):
                return f"Invalid label '{label}'"

        if not FINAL_LABEL_PATTERN.match(labels[-1]):
            return f"Invalid top-level label '{labels[-1]}'"

        return None
