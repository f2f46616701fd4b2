"""
Category Recommendation Engine

Suggests a category / sub-category / account combination for a draft
entry by ranking past entries of the same kind.

SCORING (per historical entry):
- Word overlap: |common words| / max(|words|), weighted by 0.5
- Substring bonus: +0.3 when one description contains the other
- Amount proximity: +0.2 within 10% of the draft amount, +0.1 within 50%

A candidate is admitted only when that base score is strictly above 0.3.
Admitted candidates are grouped by (category, subCategory, fromAccountId,
toAccountId), keeping the best base score per group. Each group then gets
a frequency weight (min(n / 10, 0.2)) and a recency weight (0.1 inside 30
days, 0.05 inside 90 days) computed over the whole same-kind history.
These numbers are the defaults of RecommendationSettings.

DESIGN DECISION: The recommender is a pure function. Identical input
gives identical output, so the suggestion list does not flicker while
the user types. Ties keep the order in which groups were first found.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, NamedTuple, Optional, Union

import structlog

from household_ledger.clock import days_between, now_kst
from household_ledger.config import get_settings
from household_ledger.models.ledger import (
    LedgerKind,
    Suggestion,
    as_amount,
    read_amount,
    read_date,
    read_field,
    read_kind,
    read_text,
    suggestion_key,
)

logger = structlog.get_logger(__name__)

SuggestionKey = tuple[str, str, str, str]

# Scores are rounded to this many decimals before they are compared
SCORE_PRECISION = 9


class KeyUsage(NamedTuple):
    """How often and how recently a suggestion key was used."""
    count: int
    last_used: Optional[date]


def word_overlap(description: str, other: str) -> float:
    """Share of words in common, relative to the longer word list."""
    words = description.lower().split()
    other_words = other.lower().split()
    longest = max(len(words), len(other_words))
    if longest == 0:
        return 0.0
    other_set = set(other_words)
    common = [word for word in words if word in other_set]
    return len(common) / longest


def amount_proximity(amount: Optional[Decimal], other: Optional[Decimal]) -> float:
    """Bonus for amounts close to the draft amount; 0 when either is unusable."""
    if amount is None or other is None:
        return 0.0
    diff = abs(other - amount)
    for ratio, bonus in get_settings().recommendation.amount_bands:
        if diff < amount * ratio:
            return bonus
    return 0.0


def score_candidate(
    description: str,
    amount: Any,
    candidate_description: str,
    candidate_amount: Any,
) -> float:
    """
    Base similarity score of one historical entry against the draft.

    Amounts may be anything numeric; non-positive or non-numeric amounts
    earn no proximity bonus.
    """
    settings = get_settings().recommendation
    lowered = description.lower()
    candidate_lowered = candidate_description.lower()

    similarity = word_overlap(description, candidate_description) * settings.word_overlap_weight
    if candidate_lowered in lowered or lowered in candidate_lowered:
        similarity += settings.substring_bonus

    score = similarity + amount_proximity(as_amount(amount), as_amount(candidate_amount))
    return round(score, SCORE_PRECISION)


def passes_admission(score: float) -> bool:
    """Strictly above the admission threshold."""
    return score > get_settings().recommendation.admission_threshold


def usage_table(entries: Iterable[Any]) -> Mapping[SuggestionKey, KeyUsage]:
    """
    Fold entries into a read-only table of key -> (count, last used date).

    Entries with an unparseable date still count; they just never set
    the last used date.
    """
    table: dict[SuggestionKey, KeyUsage] = {}
    for entry in entries:
        key = suggestion_key(entry)
        count, last_used = table.get(key, KeyUsage(0, None))
        entry_date = read_date(entry)
        if entry_date is not None and (last_used is None or entry_date > last_used):
            last_used = entry_date
        table[key] = KeyUsage(count + 1, last_used)
    return MappingProxyType(table)


def frequency_weight(count: int) -> float:
    return min(count / 10, get_settings().recommendation.frequency_weight_cap)


def recency_weight(last_used: Optional[date], now: datetime) -> float:
    if last_used is None:
        return 0.0
    days_since = days_between(last_used, now)
    for bound, weight in get_settings().recommendation.recency_bands:
        if days_since < bound:
            return weight
    return 0.0


def _best_candidates(
    description: str,
    amount: Any,
    entries: Iterable[Any],
    min_length: int,
) -> Mapping[SuggestionKey, tuple[float, Any]]:
    """Highest admitted base score per key, in first-admitted order."""
    best: dict[SuggestionKey, tuple[float, Any]] = {}
    for entry in entries:
        candidate_description = read_field(entry, "description")
        if not isinstance(candidate_description, str) or len(candidate_description) < min_length:
            continue
        score = score_candidate(description, amount, candidate_description, read_amount(entry))
        if not passes_admission(score):
            continue
        key = suggestion_key(entry)
        if key not in best or best[key][0] < score:
            best[key] = (score, entry)
    return MappingProxyType(best)


def recommend(
    description: str,
    amount: Any,
    kind: Union[LedgerKind, str],
    history: Iterable[Any],
    *,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> list[Suggestion]:
    """
    Rank category/account suggestions for a draft entry.

    Args:
        description: The draft's free-text description
        amount: The draft's amount
        kind: income, expense or transfer
        history: Past entries (LedgerEntry objects or raw store mappings)
        now: Reference time for recency; defaults to the current KST time
        limit: Maximum suggestions; defaults to the configured limit (5)

    Returns:
        Suggestions ordered by descending score, ties in discovery order
    """
    settings = get_settings().recommendation
    if not isinstance(description, str) or len(description) < settings.min_description_length:
        return []

    kind_value = kind.value if isinstance(kind, LedgerKind) else kind
    same_kind = [entry for entry in history if read_kind(entry) == kind_value]

    best = _best_candidates(description, amount, same_kind, settings.min_description_length)
    if not best:
        return []

    usage = usage_table(same_kind)
    now = now or now_kst()

    suggestions = []
    for key, (score, entry) in best.items():
        count, last_used = usage[key]
        suggestions.append(
            Suggestion(
                category=read_text(entry, "category") or None,
                sub_category=read_text(entry, "sub_category") or None,
                from_account_id=read_text(entry, "from_account_id") or None,
                to_account_id=read_text(entry, "to_account_id") or None,
                score=round(
                    score + frequency_weight(count) + recency_weight(last_used, now),
                    SCORE_PRECISION,
                ),
            )
        )

    # sort() is stable, so equal scores keep discovery order
    suggestions.sort(key=lambda suggestion: suggestion.score, reverse=True)
    limit = settings.suggestion_limit if limit is None else limit
    result = suggestions[:limit]

    logger.debug(
        "recommendation_computed",
        kind=kind_value,
        candidates=len(best),
        returned=len(result),
    )
    return result
