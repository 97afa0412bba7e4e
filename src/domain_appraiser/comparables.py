"""
Comparable-sales matcher.

Finds historical sales that resemble a target domain and ranks them by a
weighted similarity over length, TLD, keyword overlap and structure. A
remote sales search is tried first; the local repository is used when it is
unavailable or finds nothing.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Union

from .audit_logger import AuditLogger
from .config import ComparablesConfig
from .domain_validator import DomainValidator
from .fallback import SalesSource, with_fallback
from .models import ComparableSale, DomainKey
from .sales_data import SAMPLE_SALES
from .tld_registry import split_domain


COMPONENT = "comparables"

SIMILARITY_INDUSTRY_KEYWORDS = ("shop", "buy", "sell", "tech", "app", "web", "net", "online", "digital")
FALLBACK_TLDS = frozenset({"com", "net", "org"})
LENGTH_WINDOW = 3

_WORD = re.compile(r'[a-z]+')


@dataclass(frozen=True)
class SimilarityWeights:
    length: float = 0.30
    tld: float = 0.25
    keyword: float = 0.30
    structure: float = 0.15


@dataclass(frozen=True)
class SimilarityBreakdown:
    length: int
    tld: int
    keyword: float
    structure: int
    total: int


@dataclass(frozen=True)
class PriceRange:
    minimum: float
    maximum: float

    def __contains__(self, price: float) -> bool:
        return self.minimum <= price <= self.maximum


def extract_words(name: str) -> list[str]:
    words = []
    for part in re.split(r'[-_]', name.lower()):
        words.extend(w for w in _WORD.findall(part) if len(w) >= 2)
    return words


def length_similarity(a: DomainKey, b: DomainKey) -> int:
    return max(0, 100 - 10 * abs(len(a.name) - len(b.name)))


def tld_similarity(a: DomainKey, b: DomainKey) -> int:
    if a.tld == b.tld:
        return 100
    if a.tld == "com" or b.tld == "com":
        return 60
    return 40


def keyword_similarity(a: DomainKey, b: DomainKey) -> float:
    """Jaccard overlap of word tokens scaled to 60, plus pattern bonuses."""
    if a.name == b.name:
        return 100

    words_a, words_b = set(extract_words(a.name)), set(extract_words(b.name))
    if not words_a or not words_b:
        return 20

    jaccard = len(words_a & words_b) / len(words_a | words_b)

    bonus = 0
    if a.name[:3] == b.name[:3] or a.name[-3:] == b.name[-3:]:
        bonus += 20
    if (any(kw in a.name for kw in SIMILARITY_INDUSTRY_KEYWORDS)
            and any(kw in b.name for kw in SIMILARITY_INDUSTRY_KEYWORDS)):
        bonus += 15

    return min(100, jaccard * 60 + bonus)


def structure_similarity(a: DomainKey, b: DomainKey) -> int:
    score = 100
    if ('-' in a.name) != ('-' in b.name):
        score -= 30
    if bool(re.search(r'\d', a.name)) != bool(re.search(r'\d', b.name)):
        score -= 20
    return max(0, score)


def similarity_breakdown(
    target: DomainKey,
    candidate: DomainKey,
    weights: SimilarityWeights = SimilarityWeights(),
) -> SimilarityBreakdown:
    length = length_similarity(target, candidate)
    tld = tld_similarity(target, candidate)
    keyword = keyword_similarity(target, candidate)
    structure = structure_similarity(target, candidate)

    total = (
        length * weights.length
        + tld * weights.tld
        + keyword * weights.keyword
        + structure * weights.structure
    )
    return SimilarityBreakdown(
        length=length,
        tld=tld,
        keyword=keyword,
        structure=structure,
        total=int(round(max(0.0, min(100.0, total)))),
    )


def estimate_price_range(key: DomainKey) -> PriceRange:
    """Plausible sale prices for names like the target, used to bound candidates."""
    if key.tld == "com":
        low, high = 500.0, 500_000.0
    elif key.tld in ("net", "org"):
        low, high = 200.0, 100_000.0
    elif key.tld in ("io", "ai"):
        low, high = 300.0, 150_000.0
    else:
        low, high = 100.0, 100_000.0

    length = len(key.name)
    if length <= 4:
        low, high = low * 5, high * 10
    elif length <= 6:
        low, high = low * 2, high * 5
    elif length >= 15:
        low, high = max(100.0, low / 2), max(1000.0, high / 3)

    return PriceRange(minimum=low, maximum=high)


class SalesRepository(Protocol):
    def candidates(self, target: DomainKey, limit: int) -> list[ComparableSale]: ...


class InMemorySalesRepository:
    """
    Sales held in memory, pre-filtered the way a database query would be.

    Candidates share the target TLD or sit under com/net/org, are within
    three characters of its length, fall inside the estimated price range
    and were sold on or after the cutoff date.
    """

    def __init__(
        self,
        sales: Iterable[ComparableSale] = SAMPLE_SALES,
        min_sale_date: str = "2014-01-01",
    ) -> None:
        self._min_sale_date = min_sale_date
        self._sales: list[tuple[DomainKey, ComparableSale]] = []
        self.extend(sales)

    def __len__(self) -> int:
        return len(self._sales)

    def extend(self, sales: Iterable[ComparableSale]) -> None:
        for sale in sales:
            key = split_domain(sale.domain)
            if key is not None and key.name:
                self._sales.append((key, sale))

    def candidates(self, target: DomainKey, limit: int) -> list[ComparableSale]:
        price_range = estimate_price_range(target)
        target_length = len(target.name)

        pool = [
            (key, sale) for key, sale in self._sales
            if (key.tld == target.tld or key.tld in FALLBACK_TLDS)
            and abs(len(key.name) - target_length) <= LENGTH_WINDOW
            and sale.sold_price in price_range
            and sale.sold_date >= self._min_sale_date
        ]

        # Most recent first, then stable sort by TLD match and length distance
        pool.sort(key=lambda item: item[1].sold_date, reverse=True)
        pool.sort(key=lambda item: (item[0].tld != target.tld, abs(len(item[0].name) - target_length)))

        return [sale for _, sale in pool[:limit]]


class ComparableMatcher:
    """Ranks comparable sales for a target domain."""

    def __init__(
        self,
        repository: Optional[SalesRepository] = None,
        remote: Optional[SalesSource] = None,
        config: Optional[ComparablesConfig] = None,
        logger: Optional[AuditLogger] = None,
        timeout: float = 8.0,
        weights: SimilarityWeights = SimilarityWeights(),
    ) -> None:
        self._config = config or ComparablesConfig()
        self._repository = repository or InMemorySalesRepository(
            min_sale_date=self._config.min_sale_date
        )
        self._remote = remote
        self._logger = logger
        self._timeout = timeout
        self._weights = weights
        self._validator = DomainValidator()

    def similarity(self, target: Union[str, DomainKey], candidate: Union[str, DomainKey]) -> SimilarityBreakdown:
        return similarity_breakdown(self._as_key(target), self._as_key(candidate), self._weights)

    def rank(self, target: DomainKey, sales: Iterable[ComparableSale], limit: int) -> list[ComparableSale]:
        """Rescore sales against the target, drop weak matches, best first."""
        ranked = []
        for sale in sales:
            key = split_domain(sale.domain)
            if key is None or not key.name:
                continue
            score = similarity_breakdown(target, key, self._weights).total
            if score >= self._config.similarity_floor:
                ranked.append(sale.with_similarity(score))

        ranked.sort(key=lambda s: (-s.similarity, -s.sold_price, s.domain))
        return ranked[:limit]

    async def find_comparables(
        self,
        domain: Union[str, DomainKey],
        limit: Optional[int] = None,
    ) -> list[ComparableSale]:
        """
        Find and rank comparable sales.

        Args:
            domain: Raw domain string or an already validated key
            limit: Maximum number of results (defaults to the configured limit)

        Returns:
            Comparable sales sorted by similarity, highest first

        Raises:
            ValidationError: If a raw domain is malformed
        """
        key = self._as_key(domain)
        limit = limit if limit is not None else self._config.limit
        if limit <= 0:
            return []
        pool_size = limit * self._config.candidate_multiplier

        if self._remote is not None:
            outcome = await with_fallback(
                self._timeout,
                lambda: self._remote.fetch(key, pool_size),
                lambda failure: [],
                logger=self._logger,
                component=COMPONENT,
            )
            ranked = self.rank(key, outcome.value, limit)
            if ranked:
                self._log("Using remote comparables", key, len(ranked))
                return ranked

        ranked = self.rank(key, self._repository.candidates(key, pool_size), limit)
        self._log("Using local comparables", key, len(ranked))
        return ranked

    def _as_key(self, domain: Union[str, DomainKey]) -> DomainKey:
        if isinstance(domain, DomainKey):
            return domain
        return self._validator.require(domain)

    def _log(self, message: str, key: DomainKey, count: int) -> None:
        if self._logger is not None:
            self._logger.debug(COMPONENT, message, {"domain": key.domain, "count": count})
