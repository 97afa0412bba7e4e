"""
Factor scorers.

Pure functions over a DomainKey producing 0-100 scores for length, keywords,
TLD quality, industry relevance, liquidity, comparables quality, age and
traffic tiers, plus the local fallback estimators for brandability and
trademark risk.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

import idna

from .enums import DataSource, LegalFlag
from .keywords import (
    DEFAULT_KEYWORD_SCORE,
    GENERIC_INDUSTRY,
    exact_keyword,
    matching_keywords,
)
from .models import ComparableSale, DomainKey, LegalRisk
from .tld_registry import tld_score


AGE_FALLBACK_SCORE = 25
TRAFFIC_FALLBACK_SCORE = 20
NEUTRAL_COMPS_SCORE = 50

HIGH_VALUE_INDUSTRIES = frozenset({"finance", "technology", "health", "ecommerce", "travel"})
MEDIUM_VALUE_INDUSTRIES = frozenset({"education", "realestate", "business", "gaming"})

LEGAL_BRANDS: tuple[str, ...] = (
    'google', 'facebook', 'amazon', 'microsoft', 'apple', 'twitter', 'instagram',
    'youtube', 'linkedin', 'netflix', 'tesla', 'uber', 'airbnb', 'spotify',
    'paypal', 'visa', 'mastercard', 'coca-cola', 'pepsi', 'nike', 'adidas',
    'samsung', 'sony', 'intel', 'oracle', 'salesforce', 'adobe', 'zoom',
    'slack', 'dropbox', 'github', 'reddit', 'pinterest', 'snapchat', 'tiktok',
    'whatsapp', 'telegram', 'discord', 'twitch', 'shopify', 'square', 'stripe',
    'chatgpt', 'openai', 'anthropic', 'claude', 'midjourney', 'stability',
    'binance', 'coinbase', 'kraken', 'ftx', 'ethereum', 'polygon',
    'etsy', 'walmart', 'target', 'bestbuy', 'macys',
    'booking', 'expedia', 'marriott', 'hilton', 'hyatt',
    'mailchimp', 'hubspot', 'atlassian', 'figma', 'canva', 'notion',
)

BRAND_SUFFIXES = ("s", "app", "api", "pro", "hub", "store")
WORD_MATCH_MIN_BRAND_LENGTH = 5

_ALPHA = re.compile(r'^[a-z]+$')
_DIGIT = re.compile(r'\d')
_CONSONANT_RUN = re.compile(r'[bcdfghjklmnpqrstvwxz]{4,}')
_VOWELS = frozenset("aeiouy")


@dataclass(frozen=True)
class KeywordMatch:
    score: int
    industry: str
    keywords: tuple[str, ...]


def _is_alpha(name: str) -> bool:
    return bool(_ALPHA.match(name))


def _has_digit(name: str) -> bool:
    return bool(_DIGIT.search(name))


def unicode_name(name: str) -> str:
    """Name with punycode labels decoded, so ACE prefixes are not scored as hyphens."""
    labels = []
    for label in name.split('.'):
        if not label.startswith('xn--'):
            labels.append(label)
            continue
        try:
            labels.append(idna.decode(label))
        except idna.IDNAError:
            labels.append(label)
    return '.'.join(labels)


def score_length(key: DomainKey) -> int:
    """Shorter names score higher; hyphens, digits and extra segments cost points."""
    name = unicode_name(key.name)
    length = len(name)

    if length <= 3:
        score = 100
    elif length == 4:
        score = 95
    elif length == 5:
        score = 85
    elif length == 6:
        score = 75
    elif length == 7:
        score = 65
    elif length == 8:
        score = 55
    elif length <= 10:
        score = 45
    elif length <= 12:
        score = 35
    elif length <= 15:
        score = 25
    else:
        score = 15

    if '-' in name:
        score -= 20
    if _has_digit(name):
        score -= 5 if length <= 4 else 10
    if '_' in name:
        score -= 15
    if len(re.split(r'[-_]', name)) > 3:
        score -= 10

    return max(0, score)


def score_keywords(key: DomainKey) -> KeywordMatch:
    """
    Score a name against the industry keyword table.

    The best matching value is the base score (20 when nothing matches). An
    exact single high-value keyword earns +10, more than three matches cost
    10 points as a spam signal.
    """
    name = unicode_name(key.name)
    matches = matching_keywords(name)

    score = DEFAULT_KEYWORD_SCORE
    industry = GENERIC_INDUSTRY
    for item in matches:
        if item.value > score:
            score = item.value
            industry = item.industry

    exact = exact_keyword(name)
    if exact is not None and exact.value >= 80:
        score = min(100, score + 10)

    if len(matches) > 3:
        score = max(30, score - 10)

    return KeywordMatch(
        score=score,
        industry=industry,
        keywords=tuple(item.keyword for item in matches),
    )


def score_tld(key: DomainKey, country: Optional[str] = None) -> int:
    return tld_score(key.tld, country)


def score_industry(industry: str, keywords: Iterable[str]) -> int:
    if industry in HIGH_VALUE_INDUSTRIES:
        score = 85
    elif industry in MEDIUM_VALUE_INDUSTRIES:
        score = 60
    elif industry != GENERIC_INDUSTRY:
        score = 45
    else:
        score = 30

    if len(list(keywords)) >= 2:
        score = min(100, score + 10)

    return score


def score_liquidity(key: DomainKey) -> int:
    """How quickly a name could be resold, from 100 (short .com) down to 20."""
    name, tld = unicode_name(key.name), key.tld
    length = len(name)
    alpha = _is_alpha(name)

    if alpha:
        if tld == 'com':
            if length <= 3:
                return 100
            if length == 4:
                return 95
            if length == 5:
                return 90
            if length == 6:
                return 85
        elif tld in ('net', 'org'):
            if length <= 3:
                return 95
            if length == 4:
                return 85
        elif tld in ('io', 'ai'):
            if length <= 3:
                return 90
            if length == 4:
                return 80
        elif tld in ('co.uk', 'com.au', 'co.nz'):
            if length <= 4:
                return 85
            if length == 5:
                return 75

    if tld == 'com':
        tiers = (75, 65, 55)
    elif tld in ('net', 'org'):
        tiers = (65, 55, 45)
    elif tld in ('io', 'ai', 'co'):
        tiers = (60, 50, 40)
    else:
        tiers = (50, 40, 30)

    if length <= 8:
        score = tiers[0]
    elif length <= 12:
        score = tiers[1]
    else:
        score = tiers[2]

    if '-' in name:
        score -= 15
    if _has_digit(name):
        score -= 5 if length <= 4 else 10

    return max(20, score)


def score_comparables_quality(comps: Iterable[ComparableSale]) -> int:
    comps = list(comps)
    if not comps:
        return NEUTRAL_COMPS_SCORE

    mean = sum(c.similarity or 0 for c in comps) / len(comps)
    if mean >= 80:
        return 85
    if mean >= 60:
        return 75
    if mean >= 40:
        return 65
    if mean >= 20:
        return 55
    return NEUTRAL_COMPS_SCORE


def age_tier(years: float) -> int:
    if years >= 15:
        return 95
    if years >= 10:
        return 90
    if years >= 5:
        return 70
    if years >= 2:
        return 50
    return AGE_FALLBACK_SCORE


def traffic_tier(monthly_visits: float) -> int:
    if monthly_visits >= 1_000_000:
        return 95
    if monthly_visits >= 100_000:
        return 90
    if monthly_visits >= 10_000:
        return 70
    if monthly_visits >= 1_000:
        return 50
    if monthly_visits >= 100:
        return 30
    return TRAFFIC_FALLBACK_SCORE


def heuristic_brandability(key: DomainKey) -> tuple[int, str]:
    """
    Network-free brandability estimate.

    Rewards short, alphabetic, pronounceable names and penalizes digits,
    hyphens and long consonant clusters.

    Returns:
        (score, commentary)
    """
    name = unicode_name(key.name)
    letters = [c for c in name if c.isalpha()]
    score = 50
    notes = []

    if len(name) <= 5:
        score += 20
        notes.append("short")
    elif len(name) <= 8:
        score += 10
    elif len(name) > 12:
        score -= 15
        notes.append("long")

    if _is_alpha(name):
        score += 10
    if _has_digit(name):
        score -= 10
        notes.append("contains digits")
    if '-' in name:
        score -= 15
        notes.append("hyphenated")

    if letters:
        vowel_ratio = sum(1 for c in letters if c in _VOWELS) / len(letters)
        if 0.3 <= vowel_ratio <= 0.6:
            score += 10
            notes.append("easy to pronounce")
        elif vowel_ratio < 0.2:
            score -= 10
            notes.append("few vowels")

    if _CONSONANT_RUN.search(name):
        score -= 15
        notes.append("hard consonant cluster")

    if key.tld == 'com':
        score += 5

    score = max(0, min(100, score))
    detail = ", ".join(notes) if notes else "no notable traits"
    commentary = f"Heuristic brandability estimate for {key.domain}: {detail}."
    return score, commentary


def static_legal_risk(name: str) -> LegalRisk:
    """
    Match a name against the static brand list.

    Exact matches are severe; brand plus a common suffix or a whole-word
    occurrence of a long brand is a warning.
    """
    lowered = name.lower()

    for brand in LEGAL_BRANDS:
        if lowered == brand:
            return LegalRisk(
                flag=LegalFlag.SEVERE, multiplier=0.0, score=0,
                source=DataSource.STATIC, reason=f"exact match with '{brand}'",
            )

    for brand in LEGAL_BRANDS:
        if any(lowered == brand + suffix for suffix in BRAND_SUFFIXES):
            return LegalRisk(
                flag=LegalFlag.WARNING, multiplier=0.7, score=40,
                source=DataSource.STATIC, reason=f"'{brand}' with a common suffix",
            )

    for brand in LEGAL_BRANDS:
        if len(brand) < WORD_MATCH_MIN_BRAND_LENGTH:
            continue
        if re.search(rf'\b{re.escape(brand)}\b', lowered):
            return LegalRisk(
                flag=LegalFlag.WARNING, multiplier=0.6, score=30,
                source=DataSource.STATIC, reason=f"contains '{brand}' as a word",
            )

    return LegalRisk(flag=LegalFlag.CLEAR, multiplier=1.0, score=100, source=DataSource.STATIC)


def legal_risk_from_assessment(severity: LegalFlag, reason: Optional[str] = None) -> LegalRisk:
    if severity == LegalFlag.SEVERE:
        return LegalRisk(flag=severity, multiplier=0.0, score=0, source=DataSource.AI_ESTIMATE, reason=reason)
    if severity == LegalFlag.WARNING:
        return LegalRisk(flag=severity, multiplier=0.5, score=25, source=DataSource.AI_ESTIMATE, reason=reason)
    return LegalRisk(flag=LegalFlag.CLEAR, multiplier=1.0, score=100, source=DataSource.AI_ESTIMATE, reason=reason)
