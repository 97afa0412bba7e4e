"""
Property-based tests for score to price mapping.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.models import ComparableSale, DomainKey
from domain_appraiser.pricing import (
    comparables_median,
    estimate_price,
    is_premium_short,
    premium_multiplier,
    price_bracket,
)


score_strategy = st.floats(min_value=0.0, max_value=100.0, allow_nan=False)
key_strategy = st.builds(
    DomainKey,
    name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=15),
    tld=st.sampled_from(["com", "net", "io", "co.uk"]),
)


class TestPriceEstimateProperty:
    """Price estimates stay inside their bracket and investor never exceeds retail."""

    @given(score=score_strategy, key=st.one_of(st.none(), key_strategy))
    @settings(max_examples=200)
    def test_estimate_within_bracket_without_comps(self, score: float, key) -> None:
        """
        *For any* score without comparables, the retail estimate SHALL be
        the bracket midpoint and the investor estimate the bracket minimum.
        """
        estimate = estimate_price(score, key)
        bracket = price_bracket(score, key)

        assert estimate.bracket_min == bracket.minimum
        assert estimate.bracket_max == bracket.maximum
        assert estimate.investor == bracket.minimum
        assert bracket.minimum <= estimate.retail <= bracket.maximum
        assert estimate.investor <= estimate.retail

    @given(score=score_strategy, median=st.integers(min_value=1, max_value=10_000_000))
    @settings(max_examples=200)
    def test_investor_is_sixty_percent_of_retail_with_comps(self, score: float, median: int) -> None:
        """*For any* comparables median, investor SHALL be 60% of the blended retail price."""
        estimate = estimate_price(score, None, median)

        assert abs(estimate.investor - estimate.retail * 0.6) <= 0.5

    @given(low=score_strategy, high=score_strategy)
    @settings(max_examples=200)
    def test_bracket_minimum_is_monotonic(self, low: float, high: float) -> None:
        """*For any* two scores, the higher score SHALL NOT map to a cheaper bracket."""
        if low > high:
            low, high = high, low
        assert price_bracket(low).minimum <= price_bracket(high).minimum


class TestBrackets:

    @pytest.mark.parametrize("score,label,minimum,maximum", [
        (85, "80-100", 5_000, 50_000),
        (80, "80-100", 5_000, 50_000),
        (70, "60-80", 1_000, 5_000),
        (45, "40-60", 300, 1_000),
        (25, "20-40", 100, 300),
        (0, "0-20", 25, 100),
    ])
    def test_standard_table(self, score, label, minimum, maximum) -> None:
        bracket = price_bracket(score)

        assert (bracket.label, bracket.minimum, bracket.maximum) == (label, minimum, maximum)

    def test_short_com_uses_premium_ranges(self) -> None:
        assert price_bracket(85, DomainKey("ab", "com")).minimum == 50_000
        assert price_bracket(85, DomainKey("abcd", "com")).minimum == 25_000
        assert price_bracket(85, DomainKey("abcd", "net")).minimum == 5_000
        assert price_bracket(85, DomainKey("ab1", "com")).minimum == 5_000

    def test_low_scores_ignore_premium_ranges(self) -> None:
        assert price_bracket(10, DomainKey("ab", "com")).maximum == 100


class TestPremium:

    @pytest.mark.parametrize("name,tld,expected", [
        ("ab", "com", 1.3),
        ("abc", "com", 1.3),
        ("abcd", "com", 1.15),
        ("abcde", "com", 1.0),
        ("ab", "net", 1.0),
        ("a1", "com", 1.0),
    ])
    def test_premium_multiplier(self, name, tld, expected) -> None:
        assert premium_multiplier(DomainKey(name, tld)) == expected

    @pytest.mark.parametrize("name,tld,expected", [
        ("abcd", "com", True),
        ("abcde", "com", False),
        ("abc", "io", True),
        ("abcd", "io", False),
        ("ab", "xyz", False),
    ])
    def test_premium_short(self, name, tld, expected) -> None:
        assert is_premium_short(DomainKey(name, tld)) is expected


class TestComparablesBlend:

    def test_retail_blends_median_and_midpoint(self) -> None:
        estimate = estimate_price(70, None, 10_000)

        assert estimate.retail == 7_200
        assert estimate.investor == 4_320
        assert "comparable sales" in estimate.explanation

    def test_no_comps_explanation(self) -> None:
        estimate = estimate_price(70)

        assert estimate.retail == 3_000
        assert estimate.investor == 1_000
        assert estimate.retail_display == "$3,000"

    def test_median_uses_upper_middle(self) -> None:
        def sale(price: int) -> ComparableSale:
            return ComparableSale("x.com", price, "2023-01-01", "Test")

        assert comparables_median([]) is None
        assert comparables_median([sale(100), sale(200), sale(300)]) == 200
        assert comparables_median([sale(100), sale(200)]) == 200
