from __future__ import annotations

from datetime import date
from decimal import Decimal

from gracewise.models import Card, Transaction, default_card


def test_card_from_legacy_record() -> None:
    card = Card.model_validate(
        {"id": "k2x9a1b", "name": "CIB", "end": "2024-01-21", "due": "2024-02-15", "rate": 36, "daily": 0.098630, "fine": 100}
    )
    assert card.cycle_end_day == 21
    assert card.due_day == 15
    assert card.annual_rate_percent == Decimal("36")
    assert card.daily_rate_percent == Decimal("0.09863")
    assert card.late_fine == Decimal("100")


def test_legacy_zero_daily_rate_means_derived() -> None:
    card = Card.model_validate({"id": "a", "name": "CIB", "end": "2024-01-21", "due": "2024-02-15", "rate": "36.5", "daily": 0})
    assert card.daily_rate_percent is None
    assert card.effective_daily_rate_percent == Decimal("0.1")


def test_card_from_camel_case_record() -> None:
    card = Card.model_validate(
        {"id": "c", "name": "QNB", "cycleEndDay": 5, "dueDay": "28", "annualRatePercent": "24", "lateFine": "50"}
    )
    assert (card.cycle_end_day, card.due_day) == (5, 28)
    assert card.effective_daily_rate_percent == Decimal("24") / Decimal(365)
    assert card.late_fine == Decimal("50")


def test_card_lenient_coercion() -> None:
    card = Card.model_validate(
        {"id": 17, "name": None, "cycleEndDay": "soon", "dueDay": 45, "annualRatePercent": "n/a", "lateFine": -10}
    )
    assert card.id == "17"
    assert card.name == ""
    assert card.cycle_end_day == 21  # unparseable -> default
    assert card.due_day == 31  # clamped
    assert card.annual_rate_percent == Decimal("0")
    assert card.late_fine == Decimal("0")
    assert card.daily_rate_percent is None


def test_explicit_zero_daily_rate_is_kept_for_non_legacy_keys() -> None:
    card = Card(id="c", annual_rate_percent="36", daily_rate_percent="0")
    assert card.daily_rate_percent == Decimal("0")
    assert card.effective_daily_rate_percent == Decimal("0")


def test_default_card() -> None:
    card = default_card()
    assert (card.cycle_end_day, card.due_day) == (21, 15)
    assert card.annual_rate_percent == Decimal("0")
    assert card.late_fine == Decimal("0")


def test_transaction_aliases_and_coercion() -> None:
    t = Transaction.model_validate({"id": "t", "bankId": "k2x9a1b", "amount": "1,250.75", "date": "2024-03-09"})
    assert t.card_id == "k2x9a1b"
    assert t.amount == Decimal("1250.75")
    assert t.purchase_date == date(2024, 3, 9)


def test_transaction_bad_values_degrade() -> None:
    t = Transaction.model_validate({"id": "t", "cardId": "x", "amount": None, "purchaseDate": "yesterday-ish"})
    assert t.amount == Decimal("0")
    assert t.purchase_date is None


def test_partial_purchase_dates_are_treated_as_missing() -> None:
    assert Transaction(purchase_date="15").purchase_date is None
    assert Transaction(purchase_date="2024").purchase_date is None
    assert Transaction(purchase_date="2024-01-10T08:30:00Z").purchase_date == date(2024, 1, 10)
