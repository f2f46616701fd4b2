"""
Category Name Normalization

Backups and CSV exports from older versions of the ledger client contain
category names that lost characters to encoding damage ("유류통" for
"유류교통비", a lone "식" for "식비"). This module maps such names back to
their canonical spelling.

Normalization is a short-circuit pipeline of independent stages:

    exact map (raw) -> exact map (cleaned) -> ordered rules -> glyph heuristics -> identity

Each stage returns the canonical name or None. The first hit wins.

GUARANTEES:
- Total: never raises, unknown input comes back unchanged
- Idempotent: every replacement is itself a fixed point of the pipeline
"""

import re
from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any, Optional

Predicate = Callable[[str], bool]
NameRule = tuple[Predicate, str]
Heuristic = Callable[[str, str], Optional[str]]

# ASCII word characters, Hangul syllables and '/' survive cleaning
_BROKEN_CHARS = re.compile(r"[^\w가-힣/]", re.ASCII)


def clean_name(value: str) -> str:
    """Strip every character that is not a word character, Hangul syllable or '/'."""
    return _BROKEN_CHARS.sub("", value)


def pattern(regex: str) -> Predicate:
    """Predicate that searches ``regex`` in a name."""
    compiled = re.compile(regex)
    return lambda name: compiled.search(name) is not None


# =============================================================================
# CANONICALIZATION TABLES
# =============================================================================

CATEGORY_MAP: Mapping[str, str] = MappingProxyType({
    "유류통": "유류교통비",
    "데이비": "데이트비",
    "이비": "데이트비",
    "식이건": "식비",
    "식": "식비",
    "장/마트": "시장/마트",
    "시장/미트": "시장/마트",
    "저축성지출출": "저축성지출",
    "경조사회비": "경조사비",
    "입": "수입",
})

SUB_CATEGORY_MAP: Mapping[str, str] = MappingProxyType({
    "데이비": "데이트비",
    "이비": "데이트비",
    "식": "식비",
    "장/마트": "시장/마트",
    "시장/미트": "시장/마트",
    "건": "물건",
    "유트브": "유튜브",
})

# Order matters: the fuel/transport rule must run before anything broader
CATEGORY_RULES: tuple[NameRule, ...] = (
    (pattern(r"^유류.*통"), "유류교통비"),
    (pattern(r"^데이트|^데이.*비$|^이비$"), "데이트비"),
    (pattern(r"^식비$|^식$"), "식비"),
    (pattern(r"^시장.*마트$|^시장.*미트$|^장.*마트$"), "시장/마트"),
    (pattern(r"^저축성.*출"), "저축성지출"),
    (pattern(r"^경조사"), "경조사비"),
    (pattern(r"^수입$|^입$"), "수입"),
)

SUB_CATEGORY_RULES: tuple[NameRule, ...] = (
    (pattern(r"^데이트|^데이.*비$|^이비$"), "데이트비"),
    (pattern(r"^식비$|^식$"), "식비"),
    (pattern(r"^시장.*마트$|^시장.*미트$|^장.*마트$"), "시장/마트"),
    (pattern(r"^물건$|^건$"), "물건"),
    (pattern(r"^유류.*통"), "유류교통비"),
    (pattern(r"^유튜브|^유트"), "유튜브"),
)


def _lone_glyph(glyph: str, replacement: str) -> Heuristic:
    """Cleaned name is a single surviving ``glyph``."""
    def heuristic(raw: str, cleaned: str) -> Optional[str]:
        if cleaned == glyph or (len(cleaned) == 1 and glyph in raw):
            return replacement
        return None
    return heuristic


def _date_glyph_pair(raw: str, cleaned: str) -> Optional[str]:
    """Two surviving glyphs '이' and '비' are what is left of '데이트비'."""
    if cleaned == "이비" or (len(cleaned) == 2 and "이" in cleaned and "비" in cleaned):
        return "데이트비"
    return None


def _market_glyphs(raw: str, cleaned: str) -> Optional[str]:
    if cleaned == "장/마트" or ("장" in cleaned and "마트" in cleaned):
        return "시장/마트"
    return None


CATEGORY_HEURISTICS: tuple[Heuristic, ...] = (
    _lone_glyph("식", "식비"),
    _lone_glyph("입", "수입"),
    _date_glyph_pair,
)

SUB_CATEGORY_HEURISTICS: tuple[Heuristic, ...] = (
    _lone_glyph("건", "물건"),
    _market_glyphs,
    _date_glyph_pair,
)


# =============================================================================
# PIPELINE
# =============================================================================

class NameNormalizer:
    """
    Maps a possibly corrupted name to its canonical form.

    Each stage is a separate method so it can be exercised on its own.
    """

    def __init__(
        self,
        exact_map: Mapping[str, str],
        rules: Sequence[NameRule],
        heuristics: Sequence[Heuristic] = (),
    ):
        self._exact_map = exact_map
        self._rules = tuple(rules)
        self._heuristics = tuple(heuristics)

    def lookup(self, raw: str, cleaned: str) -> Optional[str]:
        """Stage 1: dictionary hit on the raw name, then the cleaned name."""
        return self._exact_map.get(raw) or self._exact_map.get(cleaned)

    def match_rules(self, raw: str, cleaned: str) -> Optional[str]:
        """Stage 2: first rule matching either form wins."""
        for predicate, replacement in self._rules:
            if predicate(raw) or predicate(cleaned):
                return replacement
        return None

    def apply_heuristics(self, raw: str, cleaned: str) -> Optional[str]:
        """Stage 3: single/double glyph fallbacks."""
        for heuristic in self._heuristics:
            result = heuristic(raw, cleaned)
            if result is not None:
                return result
        return None

    def normalize(self, value: Any) -> Any:
        """
        Canonical form of ``value``.

        Non-string and empty input is returned as-is.
        """
        if not isinstance(value, str) or not value:
            return value
        cleaned = clean_name(value)
        for stage in (self.lookup, self.match_rules, self.apply_heuristics):
            result = stage(value, cleaned)
            if result is not None:
                return result
        return value

    __call__ = normalize


CATEGORY_NORMALIZER = NameNormalizer(CATEGORY_MAP, CATEGORY_RULES, CATEGORY_HEURISTICS)
SUB_CATEGORY_NORMALIZER = NameNormalizer(
    SUB_CATEGORY_MAP, SUB_CATEGORY_RULES, SUB_CATEGORY_HEURISTICS
)


def normalize_category(name: str) -> str:
    """Canonical spelling of a primary category name."""
    return CATEGORY_NORMALIZER.normalize(name)


def normalize_sub_category(name: str) -> str:
    """Canonical spelling of a sub-category name."""
    return SUB_CATEGORY_NORMALIZER.normalize(name)
