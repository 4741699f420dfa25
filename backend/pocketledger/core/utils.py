"""
Core utilities for PocketLedger.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

MIN_YEAR = 1970
MAX_YEAR = 9999


def is_valid_period(month: object, year: object) -> bool:
    """Check that month/year form a usable calendar period.

    bool is rejected explicitly because it is an int subclass.
    """
    if isinstance(month, bool) or isinstance(year, bool):
        return False
    if not isinstance(month, int) or not isinstance(year, int):
        return False
    return 1 <= month <= 12 and MIN_YEAR <= year <= MAX_YEAR


def shift_month(month: int, year: int, delta: int) -> tuple[int, int]:
    """Move a (month, year) pair by ``delta`` months, wrapping across years."""
    index = year * 12 + (month - 1) + delta
    return index % 12 + 1, index // 12


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """Return the first day of the month and the first day of the next month."""
    next_month, next_year = shift_month(month, year, 1)
    return date(year, month, 1), date(next_year, next_month, 1)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
