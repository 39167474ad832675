from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from .util.money import to_decimal


DAYS_PER_YEAR = Decimal(365)


def _non_negative(value: object) -> Decimal:
    dec = to_decimal(value, default=None)
    if dec is None or dec < 0:
        return Decimal("0")
    return dec


def daily_from_annual(annual_rate_percent: object) -> Decimal:
    """36 -> 0.098630 (six places, as shown next to the annual field)."""
    return (_non_negative(annual_rate_percent) / DAYS_PER_YEAR).quantize(
        Decimal("0.000001"), rounding=ROUND_HALF_UP
    )


def annual_from_daily(daily_rate_percent: object) -> Decimal:
    """0.098630 -> 36.00"""
    return (_non_negative(daily_rate_percent) * DAYS_PER_YEAR).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def rates_consistent(annual_rate_percent: object, daily_rate_percent: object) -> bool:
    """True when the daily rate is what the annual rate derives to (at six places)."""
    return daily_from_annual(annual_rate_percent) == _non_negative(daily_rate_percent).quantize(
        Decimal("0.000001"), rounding=ROUND_HALF_UP
    )
