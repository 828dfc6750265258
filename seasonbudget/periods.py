# seasonbudget/periods.py
"""
Helpers for working with calendar months.

Definitions
- ym: integer YYYYMM, e.g., 202501 for Jan 2025
- month key: "YYYY-MM" string used in forecast rows

Public API:
- ym_from_date(date) -> int
- ym_to_month_key(YYYYMM) -> "YYYY-MM"
- month_start(datetime) -> first instant of that month
- next_month_start(datetime) / previous_month_start(datetime)
- months_remaining(year, from_date) -> ["YYYY-MM", ...]
- shift_months(date, n) -> date n calendar months away
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime
from typing import List, Union

__all__ = [
    "ym_from_date",
    "ym_to_month_key",
    "month_start",
    "next_month_start",
    "previous_month_start",
    "months_remaining",
    "shift_months",
]


# ---------- Conversions ----------


def ym_from_date(d: date) -> int:
    """Convert a date to YYYYMM integer. Example: 2025-01-15 -> 202501."""
    return d.year * 100 + d.month


def ym_to_month_key(ym: int) -> str:
    """Convert YYYYMM integer to 'YYYY-MM'."""
    if not isinstance(ym, int) or ym < 10000:
        raise ValueError("ym must be an integer like 202501")
    y, m = divmod(ym, 100)
    if m < 1 or m > 12:
        raise ValueError("Invalid ym month component")
    return f"{y:04d}-{m:02d}"


# ---------- Month boundaries ----------


def month_start(dt: datetime) -> datetime:
    """Midnight on the 1st of dt's month, keeping dt's tzinfo."""
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def next_month_start(dt: datetime) -> datetime:
    start = month_start(dt)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def previous_month_start(dt: datetime) -> datetime:
    """
    Midnight on the 1st of the month before dt.
    January rolls back to December of the previous year.
    """
    start = month_start(dt)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


# ---------- Season projections ----------


def months_remaining(year: int, from_date: Union[date, datetime]) -> List[str]:
    """
    Month keys from from_date's month through December of `year`, inclusive.
    Empty when from_date is already past that year.
    """
    y, m = from_date.year, from_date.month
    months: List[str] = []
    while (y, m) <= (year, 12):
        months.append(f"{y:04d}-{m:02d}")
        y, m = (y + 1, 1) if m == 12 else (y, m + 1)
    return months


def shift_months(d: date, months: int) -> date:
    """
    Same day `months` calendar months away, clamped to the month's last day.
    Example: shift_months(2025-05-31, -3) -> 2025-02-28.
    """
    y, m = divmod(d.month - 1 + months, 12)
    year, month = d.year + y, m + 1
    return d.replace(year=year, month=month, day=min(d.day, monthrange(year, month)[1]))
