"""
Property-based tests for the factor scorers.

Covers length, keyword, industry, liquidity, age and traffic tiers, the
heuristic brandability estimate and the static trademark screen.
"""

import idna
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_appraiser.enums import DataSource, LegalFlag
from domain_appraiser.models import ComparableSale, DomainKey
from domain_appraiser.scoring import (
    LEGAL_BRANDS,
    age_tier,
    heuristic_brandability,
    legal_risk_from_assessment,
    score_comparables_quality,
    score_industry,
    score_keywords,
    score_length,
    score_liquidity,
    static_legal_risk,
    traffic_tier,
    unicode_name,
)


name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789-"),
    min_size=1,
    max_size=40,
)
tld_strategy = st.sampled_from(["com", "net", "org", "io", "ai", "co", "co.uk", "de", "xyz"])


class TestScoreBoundsProperty:
    """Every scorer stays on the 0-100 scale."""

    @given(name=name_strategy, tld=tld_strategy)
    @settings(max_examples=200)
    def test_scores_are_bounded(self, name: str, tld: str) -> None:
        """*For any* name and TLD, every factor score SHALL lie in [0, 100]."""
        key = DomainKey(name=name, tld=tld)
        keywords = score_keywords(key)
        brand_score, commentary = heuristic_brandability(key)

        assert 0 <= score_length(key) <= 100
        assert 0 <= keywords.score <= 100
        assert 0 <= score_industry(keywords.industry, keywords.keywords) <= 100
        assert 20 <= score_liquidity(key) <= 100
        assert 0 <= brand_score <= 100
        assert key.domain in commentary

    @given(name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=20))
    @settings(max_examples=100)
    def test_longer_alphabetic_names_never_score_higher_on_length(self, name: str) -> None:
        """*For any* alphabetic name, appending a letter SHALL NOT raise the length score."""
        shorter = score_length(DomainKey(name=name, tld="com"))
        longer = score_length(DomainKey(name=name + "x", tld="com"))

        assert longer <= shorter


class TestLengthScore:

    @pytest.mark.parametrize("name,expected", [
        ("ab", 100),
        ("abc", 100),
        ("abcd", 95),
        ("abcde", 85),
        ("abcdefghij", 45),
        ("abcdefghijklmnop", 15),
        ("my-site", 45),
        ("a1b2", 90),
        ("site1234", 45),
        ("a-b-c-d", 35),
    ])
    def test_reference_values(self, name: str, expected: int) -> None:
        assert score_length(DomainKey(name=name, tld="com")) == expected


class TestKeywordScore:

    def test_exact_high_value_keyword_gets_bonus(self) -> None:
        match = score_keywords(DomainKey(name="crypto", tld="com"))

        assert match.score == 100
        assert match.industry == "finance"
        assert match.keywords == ("crypto",)

    def test_no_keyword_is_generic(self) -> None:
        match = score_keywords(DomainKey(name="zzqx", tld="com"))

        assert match.score == 20
        assert match.industry == "generic"
        assert match.keywords == ()

    def test_many_keywords_are_penalized(self) -> None:
        match = score_keywords(DomainKey(name="cryptobankpayai", tld="com"))

        assert len(match.keywords) == 4
        assert match.score == 85

    def test_best_keyword_picks_industry(self) -> None:
        match = score_keywords(DomainKey(name="hotelshop", tld="com"))

        assert match.score == 80
        assert set(match.keywords) == {"hotel", "shop"}


class TestIndustryScore:

    @pytest.mark.parametrize("industry,keywords,expected", [
        ("finance", ["crypto"], 85),
        ("finance", ["crypto", "pay"], 95),
        ("gaming", ["game"], 60),
        ("food", ["food"], 45),
        ("generic", [], 30),
    ])
    def test_reference_values(self, industry, keywords, expected) -> None:
        assert score_industry(industry, keywords) == expected


class TestLiquidityScore:

    @pytest.mark.parametrize("name,tld,expected", [
        ("abc", "com", 100),
        ("abcd", "com", 95),
        ("abc", "net", 95),
        ("abcd", "io", 80),
        ("abcd", "co.uk", 85),
        ("abcdefghi", "com", 65),
        ("ab-cd", "com", 60),
        ("a1", "xyz", 45),
        ("a-very-long-name-1", "xyz", 20),
    ])
    def test_reference_values(self, name: str, tld: str, expected: int) -> None:
        assert score_liquidity(DomainKey(name=name, tld=tld)) == expected


class TestTiers:

    @pytest.mark.parametrize("years,expected", [
        (0, 25), (1.9, 25), (2, 50), (5, 70), (10, 90), (15, 95), (30, 95),
    ])
    def test_age_tier(self, years, expected) -> None:
        assert age_tier(years) == expected

    @pytest.mark.parametrize("visits,expected", [
        (0, 20), (99, 20), (100, 30), (1_000, 50), (10_000, 70), (100_000, 90), (5_000_000, 95),
    ])
    def test_traffic_tier(self, visits, expected) -> None:
        assert traffic_tier(visits) == expected

    def test_comparables_quality(self) -> None:
        def sale(similarity: int) -> ComparableSale:
            return ComparableSale("x.com", 1000, "2023-01-01", "Test", similarity)

        assert score_comparables_quality([]) == 50
        assert score_comparables_quality([sale(90), sale(80)]) == 85
        assert score_comparables_quality([sale(65)]) == 75
        assert score_comparables_quality([sale(45)]) == 65
        assert score_comparables_quality([sale(10)]) == 50


class TestHeuristicBrandability:

    def test_short_pronounceable_com(self) -> None:
        score, _ = heuristic_brandability(DomainKey(name="zap", tld="com"))

        assert score == 95

    def test_digits_and_hyphens_cost_points(self) -> None:
        clean, _ = heuristic_brandability(DomainKey(name="brandly", tld="net"))
        noisy, commentary = heuristic_brandability(DomainKey(name="brand-ly2", tld="net"))

        assert noisy < clean
        assert "hyphenated" in commentary
        assert "contains digits" in commentary


class TestStaticLegalRiskProperty:
    """Static trademark screen against the brand list."""

    @given(brand=st.sampled_from(LEGAL_BRANDS))
    def test_exact_brand_is_severe(self, brand: str) -> None:
        """*For any* listed brand used as the whole name, the risk SHALL be severe with multiplier 0."""
        risk = static_legal_risk(brand)

        assert risk.flag == LegalFlag.SEVERE
        assert risk.multiplier == 0
        assert risk.score == 0

    @given(name=name_strategy)
    @settings(max_examples=200)
    def test_severe_always_zero_multiplier(self, name: str) -> None:
        """*For any* name, a severe flag SHALL carry a zero multiplier and clear SHALL carry 1.0."""
        risk = static_legal_risk(name)

        if risk.flag == LegalFlag.SEVERE:
            assert risk.multiplier == 0
        elif risk.flag == LegalFlag.CLEAR:
            assert risk.multiplier == 1.0
        else:
            assert 0 < risk.multiplier < 1

    def test_brand_with_suffix_is_warning(self) -> None:
        risk = static_legal_risk("googleapp")

        assert risk.flag == LegalFlag.WARNING
        assert risk.multiplier == 0.7
        assert risk.score == 40

    def test_short_brand_with_plural_is_warning(self) -> None:
        assert static_legal_risk("ubers").flag == LegalFlag.WARNING

    def test_long_brand_as_word_is_warning(self) -> None:
        risk = static_legal_risk("best-google-deals")

        assert risk.flag == LegalFlag.WARNING
        assert risk.multiplier == 0.6
        assert risk.score == 30

    def test_brand_inside_word_is_clear(self) -> None:
        assert static_legal_risk("mygoogle").flag == LegalFlag.CLEAR

    def test_short_brand_as_word_is_clear(self) -> None:
        assert static_legal_risk("uber-eats").flag == LegalFlag.CLEAR

    def test_static_source(self) -> None:
        assert static_legal_risk("zap").source == DataSource.STATIC

    def test_assessment_mapping(self) -> None:
        warning = legal_risk_from_assessment(LegalFlag.WARNING, "similar")
        severe = legal_risk_from_assessment(LegalFlag.SEVERE)
        clear = legal_risk_from_assessment(LegalFlag.CLEAR)

        assert (warning.multiplier, warning.score) == (0.5, 25)
        assert (severe.multiplier, severe.score) == (0.0, 0)
        assert (clear.multiplier, clear.score) == (1.0, 100)
        assert warning.source == DataSource.AI_ESTIMATE
        assert warning.reason == "similar"


class TestInternationalizedNamesProperty:
    """Punycode names are scored as the Unicode names they encode."""

    @given(name=st.sampled_from(["bücher", "münchen", "café", "日本", "ελληνικά"]))
    @settings(max_examples=20)
    def test_ace_prefix_is_not_penalized(self, name: str) -> None:
        """*For any* IDN label, the punycode form SHALL score like its Unicode form."""
        ace = DomainKey(name=idna.encode(name).decode("ascii"), tld="com")
        unicode_key = DomainKey(name=name, tld="com")

        assert unicode_name(ace.name) == name
        assert score_length(ace) == score_length(unicode_key)
        assert score_liquidity(ace) == score_liquidity(unicode_key)
        assert heuristic_brandability(ace)[0] == heuristic_brandability(unicode_key)[0]

    def test_bucher_com(self) -> None:
        key = DomainKey(name="xn--bcher-kva", tld="com")

        assert score_length(key) == 75
        assert score_liquidity(key) == 75
        assert "hyphenated" not in heuristic_brandability(key)[1]

    def test_malformed_ace_label_left_as_is(self) -> None:
        assert unicode_name("xn--") == "xn--"
        assert unicode_name("shop.xn--mnchen-3ya") == "shop.münchen"
