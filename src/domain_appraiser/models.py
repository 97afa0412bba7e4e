"""
Data models for the domain appraiser.

This module defines the normalized domain key, the validated evaluation
options, per-factor scores, comparable sales, legal risk, WHOIS snapshots,
price estimates and the immutable Appraisal record, plus the cache and
rate-limit bookkeeping structures.
"""

import hashlib
import json
from dataclasses import asdict, dataclass, replace
from typing import Any, Optional

from .enums import DataSource, LegalFlag
from .exceptions import ValidationError


@dataclass(frozen=True)
class DomainKey:
    """Normalized (name, tld) pair; tld may be multi-level such as 'co.uk'."""

    name: str
    tld: str

    @property
    def domain(self) -> str:
        return f"{self.name}.{self.tld}"

    def __str__(self) -> str:
        return self.domain


_OPTION_ALIASES = {
    "country": "country",
    "user_traffic": "user_traffic",
    "userTraffic": "user_traffic",
    "domain_age": "domain_age",
    "domainAge": "domain_age",
    "use_comps": "use_comps",
    "useComps": "use_comps",
    "skip_whois": "skip_whois",
    "skipWhois": "skip_whois",
}


@dataclass(frozen=True)
class EvaluationOptions:
    """Caller-supplied evaluation options, validated on construction."""

    country: Optional[str] = None
    user_traffic: Optional[int] = None
    domain_age: Optional[float] = None
    use_comps: bool = True
    skip_whois: bool = False

    def __post_init__(self) -> None:
        if self.country is not None:
            country = str(self.country).strip().lower()
            if len(country) != 2 or not country.isalpha():
                raise ValidationError(
                    code="invalid_option",
                    message="country must be a two-letter country code",
                    details={"country": self.country},
                )
            object.__setattr__(self, "country", country)

        if self.user_traffic is not None:
            if isinstance(self.user_traffic, bool) or not isinstance(self.user_traffic, (int, float)):
                raise ValidationError(
                    code="invalid_option",
                    message="user_traffic must be a number",
                    details={"user_traffic": self.user_traffic},
                )
            if self.user_traffic < 0:
                raise ValidationError(
                    code="invalid_option",
                    message="user_traffic must be non-negative",
                    details={"user_traffic": self.user_traffic},
                )
            object.__setattr__(self, "user_traffic", int(self.user_traffic))

        if self.domain_age is not None:
            if isinstance(self.domain_age, bool) or not isinstance(self.domain_age, (int, float)):
                raise ValidationError(
                    code="invalid_option",
                    message="domain_age must be a number of years",
                    details={"domain_age": self.domain_age},
                )
            if self.domain_age < 0:
                raise ValidationError(
                    code="invalid_option",
                    message="domain_age must be non-negative",
                    details={"domain_age": self.domain_age},
                )
            object.__setattr__(self, "domain_age", float(self.domain_age))

        for flag in ("use_comps", "skip_whois"):
            if not isinstance(getattr(self, flag), bool):
                raise ValidationError(
                    code="invalid_option",
                    message=f"{flag} must be a boolean",
                    details={flag: getattr(self, flag)},
                )

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EvaluationOptions":
        """
        Build options from a loosely-typed mapping.

        Accepts snake_case names and the camelCase aliases used by web
        clients. Unknown keys are rejected rather than ignored.
        """
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError(
                code="invalid_option",
                message="options must be an object",
                details={"options": repr(data)},
            )

        kwargs: dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            target = _OPTION_ALIASES.get(key)
            if target is None:
                unknown.append(key)
                continue
            if value is not None:
                kwargs[target] = value
        if unknown:
            raise ValidationError(
                code="invalid_option",
                message=f"Unknown evaluation options: {', '.join(sorted(unknown))}",
                details={"unknown": sorted(unknown)},
            )
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return asdict(self)

    def fingerprint(self) -> str:
        """MD5 hex digest over the canonical JSON form of the options."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.md5(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class FactorScore:
    """A single line of the appraisal breakdown."""

    factor: str
    score: float
    weight: float
    contribution: float
    note: Optional[str] = None
    data_source: Optional[DataSource] = None

    @classmethod
    def build(
        cls,
        factor: str,
        score: float,
        weight: float,
        note: Optional[str] = None,
        data_source: Optional[DataSource] = None,
    ) -> "FactorScore":
        clamped = max(0.0, min(100.0, float(score)))
        return cls(
            factor=factor,
            score=clamped,
            weight=weight,
            contribution=weight * clamped,
            note=note,
            data_source=data_source,
        )

    def to_dict(self) -> dict:
        return {
            "factor": self.factor,
            "score": self.score,
            "weight": self.weight,
            "contribution": self.contribution,
            "note": self.note,
            "data_source": self.data_source.value if self.data_source else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FactorScore":
        source = data.get("data_source")
        return cls(
            factor=data["factor"],
            score=data["score"],
            weight=data["weight"],
            contribution=data["contribution"],
            note=data.get("note"),
            data_source=DataSource(source) if source else None,
        )


@dataclass(frozen=True)
class ComparableSale:
    """A historical domain sale used as market evidence."""

    domain: str
    sold_price: int
    sold_date: str
    source: str
    similarity: Optional[int] = None

    def __post_init__(self) -> None:
        if self.sold_price <= 0:
            raise ValueError(f"sold_price must be positive for {self.domain}")

    def with_similarity(self, similarity: int) -> "ComparableSale":
        return replace(self, similarity=similarity)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ComparableSale":
        return cls(
            domain=data["domain"],
            sold_price=int(data["sold_price"]),
            sold_date=data["sold_date"],
            source=data["source"],
            similarity=data.get("similarity"),
        )


@dataclass(frozen=True)
class LegalRisk:
    """Trademark risk gate; severe always carries a zero multiplier."""

    flag: LegalFlag
    multiplier: float
    score: float
    source: DataSource = DataSource.STATIC
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if self.flag == LegalFlag.SEVERE and self.multiplier != 0:
            object.__setattr__(self, "multiplier", 0.0)


@dataclass(frozen=True)
class WhoisSnapshot:
    """Registration data for a domain, as reported by a WHOIS provider."""

    domain: str
    is_available: bool
    registration_date: Optional[str] = None
    expiration_date: Optional[str] = None
    registrar: Optional[str] = None
    name_servers: tuple[str, ...] = ()
    status: Optional[str] = None
    last_updated: Optional[str] = None
    age_years: Optional[float] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["name_servers"] = list(self.name_servers)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WhoisSnapshot":
        return cls(
            domain=data["domain"],
            is_available=bool(data["is_available"]),
            registration_date=data.get("registration_date"),
            expiration_date=data.get("expiration_date"),
            registrar=data.get("registrar"),
            name_servers=tuple(data.get("name_servers") or ()),
            status=data.get("status"),
            last_updated=data.get("last_updated"),
            age_years=data.get("age_years"),
        )


def format_usd(amount: int) -> str:
    return f"${amount:,}"


@dataclass(frozen=True)
class PriceEstimate:
    """Investor and retail price estimates in whole dollars."""

    investor: int
    retail: int
    explanation: str
    bracket_min: int
    bracket_max: int

    @property
    def investor_display(self) -> str:
        return format_usd(self.investor)

    @property
    def retail_display(self) -> str:
        return format_usd(self.retail)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PriceEstimate":
        return cls(**data)


@dataclass(frozen=True)
class Appraisal:
    """
    Result of one evaluation.

    Immutable once created; the only permitted change is attaching WHOIS
    data that arrives after the response, via with_whois().
    """

    domain: str
    final_score: float
    bracket: str
    price_estimate: PriceEstimate
    breakdown: tuple[FactorScore, ...]
    legal_flag: LegalFlag
    commentary: str
    comparables: tuple[ComparableSale, ...]
    created_at: str
    whois: Optional[WhoisSnapshot] = None
    options_hash: Optional[str] = None

    def with_whois(self, snapshot: WhoisSnapshot) -> "Appraisal":
        return replace(self, whois=snapshot)

    def factor(self, name: str) -> Optional[FactorScore]:
        for entry in self.breakdown:
            if entry.factor == name:
                return entry
        return None

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "final_score": self.final_score,
            "bracket": self.bracket,
            "price_estimate": self.price_estimate.to_dict(),
            "breakdown": [entry.to_dict() for entry in self.breakdown],
            "legal_flag": self.legal_flag.value,
            "commentary": self.commentary,
            "comparables": [comp.to_dict() for comp in self.comparables],
            "created_at": self.created_at,
            "whois": self.whois.to_dict() if self.whois else None,
            "options_hash": self.options_hash,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Appraisal":
        whois = data.get("whois")
        return cls(
            domain=data["domain"],
            final_score=data["final_score"],
            bracket=data["bracket"],
            price_estimate=PriceEstimate.from_dict(data["price_estimate"]),
            breakdown=tuple(FactorScore.from_dict(e) for e in data["breakdown"]),
            legal_flag=LegalFlag(data["legal_flag"]),
            commentary=data.get("commentary", ""),
            comparables=tuple(ComparableSale.from_dict(c) for c in data.get("comparables", [])),
            created_at=data["created_at"],
            whois=WhoisSnapshot.from_dict(whois) if whois else None,
            options_hash=data.get("options_hash"),
        )


@dataclass(frozen=True)
class CacheEntry:
    """A cached appraisal and the moment it was stored (epoch seconds)."""

    domain: str
    options_hash: Optional[str]
    appraisal: Appraisal
    created_at: float


@dataclass
class RateLimitWindow:
    """Fixed-window counter for one client identifier."""

    count: int
    reset_time: float


@dataclass
class StoredAppraisal:
    """An appraisal record as held by the persistence boundary."""

    record_id: int
    domain: str
    options_hash: Optional[str]
    created_at: float
    appraisal: Appraisal

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "domain": self.domain,
            "options_hash": self.options_hash,
            "created_at": self.created_at,
            "appraisal": self.appraisal.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StoredAppraisal":
        return cls(
            record_id=int(data["id"]),
            domain=data["domain"],
            options_hash=data.get("options_hash"),
            created_at=float(data["created_at"]),
            appraisal=Appraisal.from_dict(data["appraisal"]),
        )
