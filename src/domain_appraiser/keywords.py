"""
Industry keyword table.

Each entry maps a keyword found inside a domain name to an industry and a
value on a 0-100 scale. The keyword scorer picks the most valuable match.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IndustryKeyword:
    keyword: str
    industry: str
    value: int


DEFAULT_KEYWORD_SCORE = 20
GENERIC_INDUSTRY = "generic"


def _entries(industry: str, pairs: list[tuple[str, int]]) -> list[IndustryKeyword]:
    return [IndustryKeyword(keyword=k, industry=industry, value=v) for k, v in pairs]


INDUSTRY_KEYWORDS: tuple[IndustryKeyword, ...] = tuple(
    # Finance & Crypto
    _entries("finance", [
        ("crypto", 95), ("bitcoin", 90), ("finance", 85), ("bank", 90), ("pay", 80),
        ("wallet", 85), ("loan", 75), ("invest", 80), ("trade", 75), ("exchange", 85),
    ])
    # AI & Technology
    + _entries("technology", [
        ("ai", 95), ("tech", 80), ("app", 75), ("software", 70), ("cloud", 85),
        ("data", 75), ("digital", 70), ("smart", 75), ("auto", 70), ("bot", 65),
    ])
    # Health & Medical
    + _entries("health", [
        ("health", 85), ("medical", 80), ("care", 75), ("wellness", 70),
        ("fitness", 75), ("doctor", 80), ("therapy", 70), ("clinic", 75),
    ])
    # E-commerce & Retail
    + _entries("ecommerce", [
        ("shop", 80), ("store", 75), ("market", 80), ("buy", 70),
        ("sell", 70), ("deal", 65), ("sale", 65), ("cart", 60),
    ])
    # Travel & Hospitality
    + _entries("travel", [
        ("travel", 85), ("hotel", 80), ("flight", 75), ("trip", 70),
        ("vacation", 70), ("booking", 75), ("resort", 70),
    ])
    # Education & Learning
    + _entries("education", [
        ("learn", 70), ("education", 75), ("course", 65), ("study", 60),
        ("school", 70), ("training", 65),
    ])
    # Food & Dining
    + _entries("food", [
        ("food", 70), ("restaurant", 65), ("delivery", 70), ("recipe", 60), ("kitchen", 55),
    ])
    # Real Estate
    + _entries("realestate", [
        ("real", 75), ("estate", 75), ("property", 70), ("home", 70),
        ("house", 65), ("rent", 70),
    ])
    # Gaming & Entertainment
    + _entries("gaming", [
        ("game", 70), ("gaming", 75), ("play", 60), ("entertainment", 65), ("fun", 55),
    ])
    # Business & Professional
    + _entries("business", [
        ("business", 75), ("pro", 65), ("work", 60), ("career", 65), ("job", 60), ("hire", 65),
    ])
    # Generic high-value terms
    + _entries(GENERIC_INDUSTRY, [
        ("best", 60), ("top", 60), ("premium", 65), ("elite", 65), ("expert", 60),
        ("master", 60), ("quick", 55), ("fast", 55), ("easy", 55), ("simple", 55),
    ])
)


def matching_keywords(name: str) -> list[IndustryKeyword]:
    """All table entries contained in the name, in table order."""
    lowered = name.lower()
    return [item for item in INDUSTRY_KEYWORDS if item.keyword in lowered]


def exact_keyword(name: str) -> IndustryKeyword | None:
    """The entry equal to the whole name (or its plural), if any."""
    lowered = name.lower()
    for item in INDUSTRY_KEYWORDS:
        if lowered == item.keyword or lowered == item.keyword + "s":
            return item
    return None
