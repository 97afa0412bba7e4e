"""
TLD Registry - known multi-level TLDs and TLD quality scoring.

This module splits a domain into (name, tld) honouring multi-level country
TLDs such as co.uk and com.au, and scores TLD quality:
- Premium and strong generic TLDs (.com, .net, .org)
- Tech and modern TLDs (.io, .ai, .app, .dev)
- Multi-level country TLDs with their own bonus table
- Two-letter ccTLDs, boosted when they match a target country
"""

from typing import Optional

from .models import DomainKey


# ============================================================================
# MULTI-LEVEL TLDs - Europe
# ============================================================================
EUROPE_MULTI_LEVEL = frozenset({
    'co.uk', 'ac.uk', 'gov.uk', 'net.uk', 'org.uk', 'me.uk', 'ltd.uk', 'plc.uk',
    'co.de', 'com.de',
    'co.fr', 'com.fr',
    'com.es', 'nom.es', 'org.es', 'gob.es', 'edu.es',
    'co.it', 'com.it',
    'co.ru', 'com.ru', 'net.ru', 'org.ru', 'pp.ru', 'msk.ru', 'spb.ru',
    'com.pl', 'net.pl', 'org.pl', 'edu.pl', 'gov.pl', 'ngo.pl', 'shop.pl', 'travel.pl',
    'co.cz', 'com.cz',
    'co.sk', 'com.sk',
    'co.hu', 'com.hu',
    'com.ro', 'org.ro', 'tm.ro', 'nt.ro', 'nom.ro', 'info.ro', 'firm.ro', 'store.ro',
    'com.bg', 'org.bg', 'net.bg', 'edu.bg', 'gov.bg', 'biz.bg', 'info.bg', 'name.bg',
    'com.hr', 'from.hr', 'iz.hr', 'name.hr',
    'co.rs', 'org.rs', 'edu.rs', 'ac.rs', 'gov.rs', 'in.rs',
    'com.ua', 'net.ua', 'org.ua', 'edu.ua', 'gov.ua', 'in.ua', 'kiev.ua', 'lviv.ua',
    'com.tr', 'net.tr', 'org.tr', 'edu.tr', 'gov.tr', 'gen.tr', 'biz.tr', 'info.tr', 'web.tr',
})


# ============================================================================
# MULTI-LEVEL TLDs - Asia Pacific
# ============================================================================
ASIA_PACIFIC_MULTI_LEVEL = frozenset({
    'com.au', 'net.au', 'org.au', 'edu.au', 'gov.au', 'asn.au', 'id.au',
    'co.nz', 'net.nz', 'org.nz', 'ac.nz', 'govt.nz', 'geek.nz', 'gen.nz', 'kiwi.nz', 'school.nz',
    'co.in', 'net.in', 'org.in', 'gen.in', 'firm.in', 'ind.in',
    'co.jp', 'ne.jp', 'or.jp', 'ac.jp', 'ad.jp', 'ed.jp', 'go.jp', 'gr.jp', 'lg.jp',
    'com.cn', 'net.cn', 'org.cn', 'gov.cn', 'edu.cn', 'ac.cn', 'bj.cn', 'sh.cn', 'gd.cn', 'zj.cn',
    'com.hk', 'net.hk', 'org.hk', 'gov.hk', 'edu.hk', 'idv.hk',
    'com.sg', 'net.sg', 'org.sg', 'gov.sg', 'edu.sg', 'per.sg',
    'com.my', 'net.my', 'org.my', 'gov.my', 'edu.my', 'name.my',
    'co.th', 'ac.th', 'go.th', 'in.th', 'net.th', 'or.th',
    'com.ph', 'net.ph', 'org.ph', 'gov.ph', 'edu.ph', 'ngo.ph',
    'co.id', 'net.id', 'org.id', 'ac.id', 'sch.id', 'go.id', 'web.id', 'war.net.id',
    'com.vn', 'net.vn', 'org.vn', 'edu.vn', 'gov.vn', 'biz.vn', 'info.vn', 'name.vn',
    'co.kr', 'ne.kr', 'or.kr', 'ac.kr', 'go.kr', 'pe.kr', 're.kr', 'seoul.kr',
    'com.tw', 'net.tw', 'org.tw', 'idv.tw', 'game.tw', 'club.tw',
    'co.il', 'net.il', 'org.il', 'ac.il', 'gov.il', 'muni.il',
})


# ============================================================================
# MULTI-LEVEL TLDs - Americas and Africa
# ============================================================================
AMERICAS_AFRICA_MULTI_LEVEL = frozenset({
    'co.ca', 'gc.ca',
    'com.br', 'net.br', 'org.br', 'gov.br', 'edu.br', 'art.br', 'inf.br',
    'com.mx', 'net.mx', 'org.mx', 'gob.mx', 'edu.mx',
    'com.ar', 'net.ar', 'org.ar', 'gov.ar', 'edu.ar', 'tur.ar',
    'co.cl', 'gob.cl', 'gov.cl',
    'com.co', 'net.co', 'org.co', 'edu.co', 'gov.co', 'nom.co', 'web.co',
    'com.pe', 'net.pe', 'org.pe', 'edu.pe', 'gob.pe', 'nom.pe',
    'co.ve', 'com.ve', 'net.ve', 'org.ve', 'gov.ve', 'web.ve', 'info.ve',
    'co.za', 'org.za', 'net.za', 'ac.za', 'gov.za', 'law.za', 'nom.za', 'school.za', 'web.za',
    'com.ng', 'net.ng', 'org.ng', 'gov.ng', 'edu.ng',
    'co.ke', 'ne.ke', 'or.ke', 'ac.ke', 'sc.ke', 'go.ke', 'me.ke', 'info.ke',
    'com.eg', 'net.eg', 'org.eg', 'edu.eg', 'gov.eg', 'sci.eg',
})


MULTI_LEVEL_TLDS: frozenset[str] = (
    EUROPE_MULTI_LEVEL | ASIA_PACIFIC_MULTI_LEVEL | AMERICAS_AFRICA_MULTI_LEVEL
)


# ============================================================================
# TLD QUALITY TABLES
# ============================================================================
GENERIC_TLD_SCORES = {
    'com': 100,
    'net': 70, 'org': 70,
    'io': 65, 'ai': 65,
    'co': 60, 'me': 60,
    'app': 55, 'tech': 55, 'dev': 55,
    'xyz': 45, 'info': 45, 'biz': 45,
}

PREMIUM_MULTI_LEVEL = frozenset({'co.uk', 'com.au', 'co.nz'})
STRONG_MULTI_LEVEL = frozenset({'com.br', 'co.za', 'co.jp', 'com.sg', 'co.in'})

UNKNOWN_TLD_SCORE = 40


def _clean(domain: str) -> str:
    return domain.strip().lower().strip('.')


def is_multi_level_tld(tld: str) -> bool:
    return tld.lower() in MULTI_LEVEL_TLDS


def extract_tld(domain: str) -> str:
    """
    Extract the TLD of a domain, preferring the longest known multi-level TLD.

    Returns an empty string when the domain has fewer than two labels.
    """
    parts = _clean(domain).split('.')
    if len(parts) < 2 or not all(parts):
        return ''

    # Longest candidate first, never consuming the whole domain
    for i in range(max(1, len(parts) - 3), len(parts) - 1):
        candidate = '.'.join(parts[i:])
        if candidate in MULTI_LEVEL_TLDS:
            return candidate

    return parts[-1]


def extract_domain_name(domain: str) -> str:
    """Return everything before the TLD, e.g. 'example' for 'example.co.uk'."""
    cleaned = _clean(domain)
    tld = extract_tld(cleaned)
    if not tld:
        return cleaned
    return cleaned[:-(len(tld) + 1)]


def split_domain(domain: str) -> Optional[DomainKey]:
    """Split a raw domain into a DomainKey, or None with fewer than two labels."""
    tld = extract_tld(domain)
    if not tld:
        return None
    return DomainKey(name=extract_domain_name(domain), tld=tld)


def tld_country(tld: str) -> Optional[str]:
    """Country code carried by a ccTLD or multi-level country TLD."""
    normalized = tld.lower()
    if '.' in normalized:
        country = normalized.rsplit('.', 1)[-1]
        return country if len(country) == 2 else None
    if len(normalized) == 2:
        return normalized
    return None


def tld_score(tld: str, target_country: Optional[str] = None) -> int:
    """
    Score TLD quality on a 0-100 scale.

    Args:
        tld: Single or multi-level TLD, without a leading dot
        target_country: Optional two-letter country the name is aimed at

    Returns:
        Quality score
    """
    normalized = tld.lower()

    if normalized in GENERIC_TLD_SCORES:
        return GENERIC_TLD_SCORES[normalized]

    if normalized in MULTI_LEVEL_TLDS:
        if normalized in PREMIUM_MULTI_LEVEL:
            return 85
        if normalized in STRONG_MULTI_LEVEL:
            return 75
        if normalized.startswith('com.') or normalized.startswith('co.'):
            return 65
        return 55

    if len(normalized) == 2:
        if target_country and target_country.lower() == normalized:
            return 75
        return 50

    return UNKNOWN_TLD_SCORE
