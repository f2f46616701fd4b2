"""
Korea Standard Time helpers.

Every "today" and "this month" in the engine is computed at a fixed
UTC+9 offset. Using a fixed offset (rather than the host's local zone)
keeps month boundaries identical for every user of the ledger.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Optional

# Korea Standard Time has no daylight saving
KST = timezone(timedelta(hours=9), "KST")


def now_kst() -> datetime:
    """Current aware datetime in KST."""
    return datetime.now(KST)


def today_kst() -> date:
    return now_kst().date()


def month_key(day: date) -> str:
    """``YYYY-MM`` for a calendar date."""
    return f"{day.year:04d}-{day.month:02d}"


def previous_month(day: date) -> date:
    """First day of the month before ``day``'s month."""
    if day.month == 1:
        return date(day.year - 1, 12, 1)
    return date(day.year, day.month - 1, 1)


def clamp_day(year: int, month: int, day: int) -> date:
    """
    Build a date, clamping the day into the month.

    The 31st carried into a 30-day month becomes the 30th; the 29th to
    31st carried into February become its last day.
    """
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last_day)))


def start_of_day_kst(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=KST)


def days_between(earlier: date, now: Optional[datetime] = None) -> float:
    """
    Fractional days elapsed from midnight KST of ``earlier`` to ``now``.

    Negative when ``earlier`` lies in the future.
    """
    now = now or now_kst()
    if now.tzinfo is None:
        now = now.replace(tzinfo=KST)
    return (now - start_of_day_kst(earlier)).total_seconds() / 86400
