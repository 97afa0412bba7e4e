"""
Score to price mapping.

A final score selects one of five brackets, each carrying a dollar range.
Alphabetic short .com names use a raised range table. When comparable sales
are available their median is blended into the retail estimate.
"""

import statistics
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import ComparableSale, DomainKey, PriceEstimate


@dataclass(frozen=True)
class PriceBracket:
    label: str
    minimum: int
    maximum: int

    @property
    def midpoint(self) -> float:
        return (self.minimum + self.maximum) / 2


# (threshold, label, standard range, <=3 letter .com range, 4 letter .com range)
BRACKET_TABLE: tuple[tuple[int, str, tuple[int, int], tuple[int, int], tuple[int, int]], ...] = (
    (80, "80-100", (5_000, 50_000), (50_000, 500_000), (25_000, 100_000)),
    (60, "60-80", (1_000, 5_000), (25_000, 100_000), (10_000, 50_000)),
    (40, "40-60", (300, 1_000), (10_000, 50_000), (5_000, 25_000)),
    (20, "20-40", (100, 300), (100, 300), (100, 300)),
    (0, "0-20", (25, 100), (25, 100), (25, 100)),
)

PREMIUM_SHORT_TLDS = {"com": 4, "net": 3, "org": 3, "io": 3, "ai": 3}


def _short_com_length(key: Optional[DomainKey]) -> Optional[int]:
    if key is None or key.tld != "com" or not key.name.isascii() or not key.name.isalpha():
        return None
    return len(key.name)


def price_bracket(score: float, key: Optional[DomainKey] = None) -> PriceBracket:
    """Pick the bracket for a final score, using the premium table for short .com names."""
    short_length = _short_com_length(key)

    for threshold, label, standard, three_letter, four_letter in BRACKET_TABLE:
        if score >= threshold:
            if short_length is not None and short_length <= 3:
                low, high = three_letter
            elif short_length == 4:
                low, high = four_letter
            else:
                low, high = standard
            return PriceBracket(label=label, minimum=low, maximum=high)

    # Negative scores never occur after clamping; treat them as the lowest bracket.
    _, label, standard, _, _ = BRACKET_TABLE[-1]
    return PriceBracket(label=label, minimum=standard[0], maximum=standard[1])


def premium_multiplier(key: DomainKey) -> float:
    short_length = _short_com_length(key)
    if short_length is None:
        return 1.0
    if short_length <= 3:
        return 1.3
    if short_length == 4:
        return 1.15
    return 1.0


def is_premium_short(key: DomainKey) -> bool:
    """Short names under the strongest TLDs, weighted with the premium table."""
    limit = PREMIUM_SHORT_TLDS.get(key.tld)
    return limit is not None and len(key.name) <= limit


def comparables_median(comps: Iterable[ComparableSale]) -> Optional[int]:
    prices = [c.sold_price for c in comps]
    if not prices:
        return None
    return statistics.median_high(prices)


def estimate_price(
    score: float,
    key: Optional[DomainKey] = None,
    comps_median: Optional[int] = None,
) -> PriceEstimate:
    """
    Estimate investor and retail prices.

    Without comparables the investor price is the bracket minimum and retail
    the midpoint. With a comparables median, retail blends 60% median with
    40% midpoint and investor is 60% of retail.
    """
    bracket = price_bracket(score, key)
    midpoint = bracket.midpoint

    if comps_median and comps_median > 0:
        retail = round(0.6 * comps_median + 0.4 * midpoint)
        investor = round(retail * 0.6)
        explanation = (
            f"Price estimate based on {score:.1f}/100 score and comparable sales data."
        )
    else:
        retail = round(midpoint)
        investor = bracket.minimum
        explanation = (
            f"Price estimate based on {score:.1f}/100 algorithmic score. "
            "Add comparable sales data for more accurate pricing."
        )

    return PriceEstimate(
        investor=int(investor),
        retail=int(retail),
        explanation=explanation,
        bracket_min=bracket.minimum,
        bracket_max=bracket.maximum,
    )
