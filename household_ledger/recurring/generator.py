"""
Recurring (fixed) expense carry-forward.

When a new month starts, fixed expenses from the previous month are
cloned into it. The run is one-shot per month: as soon as any fixed
expense exists in the current month, generated or entered by hand,
nothing further is generated for that month.

Dates are compared in KST. A source on the 31st carried into a 30-day
month lands on the 30th (the day is clamped to the month's last day).

CRITICAL: This module only proposes entries. Inserting them must be a
single atomic replace of the ledger (see LedgerStoreInterface.update),
otherwise two concurrent runs could both see an empty month.
"""

from collections.abc import Callable, Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from household_ledger.clock import clamp_day, month_key, previous_month, today_kst
from household_ledger.models.ledger import (
    LedgerEntry,
    new_entry_id,
    read_amount,
    read_date_text,
    read_field,
    read_text,
)

logger = structlog.get_logger(__name__)

# (date, category, subCategory, amount, fromAccountId, toAccountId)
ObligationKey = tuple[str, str, str, Optional[Decimal], str, str]


def obligation_key(entry: Any, on: Optional[str] = None) -> ObligationKey:
    """
    Semantic identity of a fixed obligation.

    ``on`` overrides the entry's date. Absent and empty text compare equal;
    amounts compare numerically.
    """
    return (
        on if on is not None else read_date_text(entry),
        read_text(entry, "category"),
        read_text(entry, "sub_category"),
        read_amount(entry),
        read_text(entry, "from_account_id"),
        read_text(entry, "to_account_id"),
    )


def fixed_entries_in(history: Iterable[Any], month: str) -> list[Any]:
    """Fixed-expense entries whose date text starts with ``month`` (YYYY-MM)."""
    return [
        entry
        for entry in history
        if read_field(entry, "is_fixed_expense") is True
        and read_date_text(entry).startswith(month)
    ]


def should_generate(history: Sequence[Any], today: date) -> bool:
    """
    One-shot gate: last month has fixed expenses and this month has none.
    """
    current = month_key(today)
    previous = month_key(previous_month(today))
    return bool(fixed_entries_in(history, previous)) and not fixed_entries_in(history, current)


def carry_forward_date(source: date, today: date) -> date:
    """Same day-of-month as ``source``, in ``today``'s month (clamped)."""
    return clamp_day(today.year, today.month, source.day)


def generate_recurring(
    history: Iterable[Any],
    today: Optional[date] = None,
    *,
    id_factory: Callable[[], str] = new_entry_id,
) -> list[LedgerEntry]:
    """
    Propose this month's copies of last month's fixed expenses.

    Args:
        history: The full ledger (LedgerEntry objects or raw store mappings)
        today: Today's date in KST; defaults to the current KST date
        id_factory: Produces a fresh id for each clone

    Returns:
        New entries to prepend to the ledger; empty when the one-shot gate
        is closed or every candidate already exists
    """
    history = list(history)
    today = today or today_kst()

    if not should_generate(history, today):
        return []

    existing = {obligation_key(entry) for entry in history}
    previous = month_key(previous_month(today))

    clones: list[LedgerEntry] = []
    for source in fixed_entries_in(history, previous):
        try:
            entry = (
                source
                if isinstance(source, LedgerEntry)
                else LedgerEntry.model_validate(source)
            )
        except ValidationError as e:
            # One bad row must not block the rest of the month
            logger.warning(
                "recurring_source_skipped",
                entry_id=read_field(source, "id"),
                date=read_date_text(source),
                error_count=e.error_count(),
            )
            continue

        target = carry_forward_date(entry.date, today)
        if obligation_key(entry, on=target.isoformat()) in existing:
            continue

        clones.append(
            entry.model_copy(
                update={
                    "id": id_factory(),
                    "date": target,
                    "is_fixed_expense": True,
                }
            )
        )

    logger.debug(
        "recurring_generated",
        month=month_key(today),
        generated=len(clones),
    )
    return clones
