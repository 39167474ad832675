"""
Grace-period calculator.

Maps a purchase date onto its billing cycle and payment due date, then classifies the
transaction as in grace, due today or overdue (with simple interest and a flat late fine).

Everything here is pure: no I/O, no shared state, and malformed input degrades to
documented defaults instead of raising.
"""

from __future__ import annotations

import logging
from datetime import MAXYEAR, date
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from .cards import CardDirectory
from .models import (
    Card,
    PortfolioSummary,
    StatusCategory,
    Transaction,
    TransactionAnalysis,
    default_card,
)
from .util.dates import add_months, clamped_date, coerce_date, coerce_date_or_today, days_between
from .util.money import round_cents, round_half_up, simple_interest


logger = logging.getLogger(__name__)

CardLike = Union[Card, Mapping[str, object]]
TransactionLike = Union[Transaction, Mapping[str, object]]


def _as_card(card: Optional[CardLike]) -> Card:
    if card is None:
        return default_card()
    if isinstance(card, Card):
        return card
    return Card.model_validate(dict(card))


def _as_transaction(transaction: TransactionLike) -> Transaction:
    if isinstance(transaction, Transaction):
        return transaction
    return Transaction.model_validate(dict(transaction))


def _month_date(year: int, month: int, day: int) -> date:
    # Cycles past year 9999 cannot be represented; pin them to the last valid date.
    if year > MAXYEAR:
        return date.max
    return clamped_date(year, month, day)


def cycle_end_date(purchase_date: object, cycle_end_day: int) -> date:
    """
    Cycle-end date of the billing cycle the purchase belongs to.

    A purchase made on the cycle-end day itself still belongs to that cycle; anything
    later rolls into the cycle ending next month.
    """
    purchased = coerce_date_or_today(purchase_date)
    year, month = purchased.year, purchased.month
    if purchased.day > cycle_end_day:
        year, month = add_months(year, month, 1)
    return _month_date(year, month, cycle_end_day)


def resolve_due_date(purchase_date: object, cycle_end_day: int, due_day: int) -> date:
    """
    Payment due date for a purchase: `due_day` of the month after the cycle-end month,
    pulled back to the month's last day when the month is shorter (31 -> Feb 28/29).

    A missing or unparseable purchase date is treated as today.
    """
    cycle_end = cycle_end_date(purchase_date, cycle_end_day)
    year, month = add_months(cycle_end.year, cycle_end.month, 1)
    return _month_date(year, month, due_day)


def _progress_percent(grace_days: int, days_left: int) -> int:
    if grace_days <= 0:
        return 100
    elapsed = Decimal(grace_days - days_left) / Decimal(grace_days) * 100
    return max(0, min(round_half_up(elapsed), 100))


def analyze(
    transaction: TransactionLike,
    card: Optional[CardLike] = None,
    as_of: object = None,
) -> TransactionAnalysis:
    """
    Compute due date, grace window and financial status for one transaction.

    `card` may be None when the transaction's card cannot be resolved; the default
    billing configuration (cycle end 21, due 15, no interest, no fine) is used.
    `as_of` defaults to today. The result depends only on the arguments.
    """
    txn = _as_transaction(transaction)
    cfg = _as_card(card)
    today = coerce_date_or_today(as_of)

    purchased = txn.purchase_date
    if purchased is None:
        logger.debug("Transaction %r has no usable purchase date; using %s", txn.id, today)
        purchased = today

    cycle_end = cycle_end_date(purchased, cfg.cycle_end_day)
    due = resolve_due_date(purchased, cfg.cycle_end_day, cfg.due_day)
    grace_days = days_between(purchased, due)
    days_left = days_between(today, due)

    amount = txn.amount
    interest = Decimal("0")
    fine = Decimal("0")
    overdue_days = 0

    if days_left > 0:
        status = StatusCategory.IN_GRACE
    elif days_left == 0:
        status = StatusCategory.DUE_TODAY
    else:
        status = StatusCategory.OVERDUE
        overdue_days = -days_left
        interest = simple_interest(amount, cfg.effective_daily_rate_percent, overdue_days)
        fine = cfg.late_fine

    return TransactionAnalysis(
        transaction_id=txn.id,
        card_id=txn.card_id,
        purchase_date=purchased,
        cycle_end_date=cycle_end,
        due_date=due,
        grace_days=grace_days,
        days_left=days_left,
        overdue_days=overdue_days,
        amount=round_cents(amount),
        interest=round_cents(interest),
        fine=round_cents(fine),
        total_due=round_cents(amount + interest + fine),
        status=status,
        progress_percent=_progress_percent(grace_days, days_left),
    )


def analyze_all(
    transactions: Iterable[TransactionLike],
    cards: Iterable[CardLike],
    as_of: object = None,
    default: Optional[Card] = None,
) -> list[TransactionAnalysis]:
    """
    Analyse a batch against one card lookup table. Output order follows input order.
    """
    directory = CardDirectory((_as_card(c) for c in cards), default=default)
    # Pin "now" once so every row in the batch shares the same as-of date.
    today = coerce_date(as_of) or date.today()

    out: list[TransactionAnalysis] = []
    for raw in transactions:
        txn = _as_transaction(raw)
        out.append(analyze(txn, directory.get(txn.card_id), as_of=today))
    return out


def summarize(analyses: Iterable[TransactionAnalysis]) -> PortfolioSummary:
    counts = {s: 0 for s in StatusCategory}
    principal = interest = fines = total = Decimal("0")
    next_due: Optional[date] = None
    n = 0

    for a in analyses:
        n += 1
        counts[a.status] += 1
        principal += a.amount
        interest += a.interest
        fines += a.fine
        total += a.total_due
        if a.status != StatusCategory.OVERDUE and (next_due is None or a.due_date < next_due):
            next_due = a.due_date

    return PortfolioSummary(
        count=n,
        in_grace=counts[StatusCategory.IN_GRACE],
        due_today=counts[StatusCategory.DUE_TODAY],
        overdue=counts[StatusCategory.OVERDUE],
        total_principal=round_cents(principal),
        total_interest=round_cents(interest),
        total_fines=round_cents(fines),
        total_due=round_cents(total),
        next_due_date=next_due,
    )
