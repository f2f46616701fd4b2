"""
Ledger repair: apply name normalization to whole entries.

Used when a backup is restored or a CSV is imported. Entries are never
modified in place; a repaired entry is a copy, and an entry that needed
no repair is returned as the very same object.
"""

from collections.abc import Callable, Iterable

import structlog

from household_ledger.models.ledger import LedgerEntry, RepairReport
from household_ledger.normalization.names import normalize_category, normalize_sub_category

logger = structlog.get_logger(__name__)

NameFn = Callable[[str], str]


def repair_entry(
    entry: LedgerEntry,
    category_normalizer: NameFn = normalize_category,
    sub_category_normalizer: NameFn = normalize_sub_category,
) -> LedgerEntry:
    """Copy of ``entry`` with canonical category names (or ``entry`` itself)."""
    category = category_normalizer(entry.category) if entry.category else entry.category
    sub_category = (
        sub_category_normalizer(entry.sub_category)
        if entry.sub_category
        else entry.sub_category
    )
    if category == entry.category and sub_category == entry.sub_category:
        return entry
    return entry.model_copy(update={"category": category, "sub_category": sub_category})


def repair_ledger(
    entries: Iterable[LedgerEntry],
    category_normalizer: NameFn = normalize_category,
    sub_category_normalizer: NameFn = normalize_sub_category,
) -> RepairReport:
    """
    Repair every entry of a ledger, keeping order.

    Returns:
        RepairReport with the repaired ledger and the ids that changed
    """
    repaired: list[LedgerEntry] = []
    changed_ids: list[str] = []

    for entry in entries:
        fixed = repair_entry(entry, category_normalizer, sub_category_normalizer)
        if fixed is not entry:
            changed_ids.append(entry.id)
            logger.debug(
                "category_repaired",
                entry_id=entry.id,
                category=(entry.category, fixed.category),
                sub_category=(entry.sub_category, fixed.sub_category),
            )
        repaired.append(fixed)

    return RepairReport(entries=repaired, repaired_ids=changed_ids)
