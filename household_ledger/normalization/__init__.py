"""Category name normalization package."""

from household_ledger.normalization.names import (
    CATEGORY_NORMALIZER,
    SUB_CATEGORY_NORMALIZER,
    NameNormalizer,
    clean_name,
    normalize_category,
    normalize_sub_category,
)
from household_ledger.normalization.repair import repair_entry, repair_ledger

__all__ = [
    "CATEGORY_NORMALIZER",
    "SUB_CATEGORY_NORMALIZER",
    "NameNormalizer",
    "clean_name",
    "normalize_category",
    "normalize_sub_category",
    "repair_entry",
    "repair_ledger",
]
