from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from gracewise.rates import annual_from_daily, daily_from_annual, rates_consistent
from gracewise.util.dates import add_months, clamped_date, coerce_date, parse_iso_date
from gracewise.util.money import money_str, round_cents, simple_interest, to_decimal


def test_parse_iso_date_basic() -> None:
    assert parse_iso_date("2024-01-10") == date(2024, 1, 10)
    assert parse_iso_date(" 2024-01-10T08:30:00.000Z ") == date(2024, 1, 10)


def test_parse_iso_date_rejects_empty() -> None:
    with pytest.raises(ValueError):
        parse_iso_date("  ")


def test_coerce_date_is_lenient() -> None:
    assert coerce_date(datetime(2024, 5, 1, 12, 0)) == date(2024, 5, 1)
    assert coerce_date(date(2024, 5, 1)) == date(2024, 5, 1)
    assert coerce_date("garbage") is None
    assert coerce_date(12345) is None
    assert coerce_date(None) is None


def test_add_months_rolls_over_years() -> None:
    assert add_months(2024, 12, 1) == (2025, 1)
    assert add_months(2024, 11, 2) == (2025, 1)
    assert add_months(2024, 1, -1) == (2023, 12)
    assert add_months(2024, 6, 0) == (2024, 6)


def test_clamped_date() -> None:
    assert clamped_date(2023, 2, 31) == date(2023, 2, 28)
    assert clamped_date(2024, 2, 31) == date(2024, 2, 29)
    assert clamped_date(2024, 4, 31) == date(2024, 4, 30)
    assert clamped_date(2024, 1, 31) == date(2024, 1, 31)


def test_to_decimal_variants() -> None:
    assert to_decimal("1,000.50") == Decimal("1000.50")
    assert to_decimal("EGP 36") == Decimal("36")
    assert to_decimal(1000.5) == Decimal("1000.5")
    assert to_decimal("abc") == Decimal("0")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(True) == Decimal("0")
    assert to_decimal(float("nan")) == Decimal("0")
    assert to_decimal("abc", default=None) is None


def test_round_cents_half_up() -> None:
    assert round_cents(Decimal("4.935")) == Decimal("4.94")
    assert round_cents(Decimal("4.9315")) == Decimal("4.93")


def test_simple_interest() -> None:
    assert simple_interest(Decimal("1000"), Decimal("0.1"), 5) == Decimal("5")
    assert simple_interest(Decimal("1000"), Decimal("0.1"), 0) == Decimal("0")


def test_money_str() -> None:
    assert money_str(Decimal("1104.9315")) == "EGP 1,104.93"
    assert money_str(Decimal("3"), currency="USD") == "USD 3.00"
    assert money_str(Decimal("3"), currency="") == "3.00"


def test_rate_sync() -> None:
    assert daily_from_annual("36") == Decimal("0.098630")
    assert annual_from_daily("0.098630") == Decimal("36.00")
    assert daily_from_annual("-1") == Decimal("0.000000")
    assert annual_from_daily("x") == Decimal("0.00")


def test_rates_consistent() -> None:
    assert rates_consistent("36", "0.09863")
    assert not rates_consistent("36", "0.1")


@pytest.mark.parametrize("value", ["15", "2024", "2024-01", "Jan 10", "10/01/2024", "2024-01-10 junk"])
def test_parse_iso_date_rejects_partial_or_free_form(value: str) -> None:
    with pytest.raises(ValueError):
        parse_iso_date(value)
    assert coerce_date(value) is None


def test_to_decimal_rejects_oversized_values() -> None:
    assert to_decimal("1" + "0" * 30) == Decimal("0")
    assert to_decimal(1e30) == Decimal("0")
    assert to_decimal(Decimal("1E+16"), default=None) is None
    assert to_decimal("999999999999999.99") == Decimal("999999999999999.99")


def test_round_cents_beyond_default_precision() -> None:
    big = Decimal("1" + "0" * 40 + ".005")
    assert round_cents(big) == Decimal("1" + "0" * 40 + ".01")
