"""Shared fixtures for the Household Ledger tests."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest

from household_ledger.config import get_settings
from household_ledger.models.ledger import LedgerEntry, LedgerKind

KST = timezone(timedelta(hours=9))


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; make every test see the current environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_entry():
    """Factory for valid LedgerEntry objects with sensible defaults."""
    ids = count(1)

    def factory(**overrides) -> LedgerEntry:
        fields = {
            "id": f"E{next(ids)}",
            "date": date(2024, 6, 1),
            "kind": LedgerKind.EXPENSE,
            "category": "식비",
            "description": "",
            "amount": Decimal("10000"),
            "from_account_id": "A1",
        }
        fields.update(overrides)
        return LedgerEntry(**fields)

    return factory


@pytest.fixture
def june_10_kst() -> datetime:
    return datetime(2024, 6, 10, 12, 0, tzinfo=KST)
