from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Optional

from dateutil.parser import isoparse


def parse_iso_date(value: str) -> date:
    """
    Parse dates like:
    - "2024-01-10"
    - "2024-01-10T00:00:00"
    - "2024-01-10T08:30:00.000Z"

    Only full YYYY-MM-DD dates are accepted; partial values like "15" or "2024" are rejected
    rather than completed from today's date.
    """
    if value is None:
        raise ValueError("parse_iso_date: value is None")
    s = value.strip()
    if not s:
        raise ValueError("parse_iso_date: empty string")
    if len(s) < 10:
        raise ValueError(f"parse_iso_date: incomplete date {s!r}")
    return isoparse(s).date()


def coerce_date(value: object) -> Optional[date]:
    """
    Lenient conversion used by the record models: returns None instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_iso_date(value)
        except (ValueError, OverflowError):
            return None
    return None


def coerce_date_or_today(value: object) -> date:
    return coerce_date(value) or date.today()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    # month is 1-based; works for negative offsets too.
    idx = year * 12 + (month - 1) + months
    return idx // 12, idx % 12 + 1


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, pulling `day` back to the month's last day when it overflows."""
    return date(year, month, max(1, min(day, days_in_month(year, month))))


def days_between(start: date, end: date) -> int:
    return (end - start).days
