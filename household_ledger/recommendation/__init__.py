"""Category recommendation package."""

from household_ledger.recommendation.recommender import (
    KeyUsage,
    passes_admission,
    recommend,
    score_candidate,
    usage_table,
    word_overlap,
)
from household_ledger.recommendation.rules import (
    DEFAULT_RULES,
    apply_auto_categorization,
    auto_categorize,
    learn_rule,
)

__all__ = [
    "DEFAULT_RULES",
    "KeyUsage",
    "apply_auto_categorization",
    "auto_categorize",
    "learn_rule",
    "passes_admission",
    "recommend",
    "score_candidate",
    "usage_table",
    "word_overlap",
]
