from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional


_CENT = Decimal("0.01")
# Largest magnitude accepted as money or a rate (10**15); bigger values are treated as junk.
_MAX_ADJUSTED_EXPONENT = 15
_NUMBER_RE = re.compile(r"[-+]?\d[\d,]*(?:\.\d+)?|[-+]?\.\d+")


def to_decimal(value: object, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """
    Lenient numeric coercion. Accepts values like:
    - 1000, 1000.5, Decimal("12.34")
    - "1,000.50"
    - "EGP 36"
    Anything unparseable (None, "", "abc", NaN, inf, values of 10**16 and up) returns `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, (int, float)):
        dec = Decimal(str(value))
    elif isinstance(value, str):
        m = _NUMBER_RE.search(value)
        if not m:
            return default
        try:
            dec = Decimal(m.group(0).replace(",", ""))
        except InvalidOperation:
            return default
    else:
        return default

    if not dec.is_finite() or dec.adjusted() > _MAX_ADJUSTED_EXPONENT:
        return default
    return dec


def to_non_negative_decimal(value: object) -> Decimal:
    dec = to_decimal(value)
    return dec if dec and dec > 0 else Decimal("0")


def to_optional_decimal(value: object) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    dec = to_decimal(value, default=None)
    if dec is None:
        return None
    return dec if dec > 0 else Decimal("0")


def round_cents(value: Decimal) -> Decimal:
    # Products of large amounts, rates and day counts can exceed the default 28 digits.
    with localcontext() as ctx:
        ctx.prec = 80
        return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def simple_interest(amount: Decimal, daily_rate_percent: Decimal, days: int) -> Decimal:
    """principal x daily rate x elapsed days, no compounding."""
    return amount * (daily_rate_percent / Decimal(100)) * Decimal(days)


def money_str(value: Decimal, currency: str = "EGP") -> str:
    dec = round_cents(value)
    prefix = f"{currency} " if currency else ""
    return f"{prefix}{dec:,.2f}"
