"""Entry validation package."""

from household_ledger.validation.validator import EntryValidator

__all__ = ["EntryValidator"]
