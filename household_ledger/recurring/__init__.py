"""Recurring fixed-expense package."""

from household_ledger.recurring.generator import (
    carry_forward_date,
    fixed_entries_in,
    generate_recurring,
    obligation_key,
    should_generate,
)

__all__ = [
    "carry_forward_date",
    "fixed_entries_in",
    "generate_recurring",
    "obligation_key",
    "should_generate",
]
