from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .util.dates import coerce_date
from .util.money import to_decimal, to_non_negative_decimal, to_optional_decimal


DEFAULT_CYCLE_END_DAY = 21
DEFAULT_DUE_DAY = 15


def _coerce_day(value: object, fallback: int) -> int:
    """
    Accept a day-of-month as int/str ("21"), or a full ISO date ("2024-01-21") as stored
    by older card records. Out-of-range numbers are clamped into 1..31.
    """
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, (int, float, Decimal)):
        try:
            num = int(value)
        except (ValueError, OverflowError):
            return fallback
    elif isinstance(value, str) and value.strip().isdigit():
        num = int(value.strip())
    else:
        d = coerce_date(value)
        if d is None:
            return fallback
        num = d.day
    return max(1, min(num, 31))


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


class StatusCategory(str, Enum):
    IN_GRACE = "IN_GRACE"
    DUE_TODAY = "DUE_TODAY"
    OVERDUE = "OVERDUE"


class Card(BaseModel):
    """
    Billing configuration for one credit card.

    Field names follow Python conventions; the camelCase keys and the short keys
    (`end`, `due`, `rate`, `daily`, `fine`) written by older exports are accepted too.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    name: str = ""
    cycle_end_day: int = Field(
        default=DEFAULT_CYCLE_END_DAY,
        validation_alias=AliasChoices("cycle_end_day", "cycleEndDay", "end"),
    )
    due_day: int = Field(
        default=DEFAULT_DUE_DAY,
        validation_alias=AliasChoices("due_day", "dueDay", "due"),
    )
    annual_rate_percent: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("annual_rate_percent", "annualRatePercent", "rate"),
    )
    # None means "derive from the annual rate".
    daily_rate_percent: Optional[Decimal] = Field(
        default=None,
        validation_alias=AliasChoices("daily_rate_percent", "dailyRatePercent", "daily"),
    )
    late_fine: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("late_fine", "lateFine", "fine"),
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_unset_legacy_daily(cls, data: object) -> object:
        # Old card forms saved an empty daily field as 0 even when an annual rate was given.
        if isinstance(data, dict) and "daily" in data:
            daily = to_decimal(data.get("daily"), default=None)
            annual = to_decimal(data.get("rate"), default=None)
            if (daily is None or daily == 0) and annual:
                data = {k: v for k, v in data.items() if k != "daily"}
        return data

    @field_validator("id", "name", mode="before")
    @classmethod
    def _text(cls, v: object) -> str:
        return _coerce_text(v)

    @field_validator("cycle_end_day", mode="before")
    @classmethod
    def _cycle_end_day(cls, v: object) -> int:
        return _coerce_day(v, DEFAULT_CYCLE_END_DAY)

    @field_validator("due_day", mode="before")
    @classmethod
    def _due_day(cls, v: object) -> int:
        return _coerce_day(v, DEFAULT_DUE_DAY)

    @field_validator("annual_rate_percent", "late_fine", mode="before")
    @classmethod
    def _money(cls, v: object) -> Decimal:
        return to_non_negative_decimal(v)

    @field_validator("daily_rate_percent", mode="before")
    @classmethod
    def _daily(cls, v: object) -> Optional[Decimal]:
        return to_optional_decimal(v)

    @property
    def effective_daily_rate_percent(self) -> Decimal:
        if self.daily_rate_percent is not None:
            return self.daily_rate_percent
        return self.annual_rate_percent / Decimal(365)


def default_card(
    cycle_end_day: int = DEFAULT_CYCLE_END_DAY,
    due_day: int = DEFAULT_DUE_DAY,
    annual_rate_percent: Decimal = Decimal("0"),
    late_fine: Decimal = Decimal("0"),
) -> Card:
    """The configuration substituted when a transaction's card cannot be resolved."""
    return Card(
        id="",
        name="Default",
        cycle_end_day=cycle_end_day,
        due_day=due_day,
        annual_rate_percent=annual_rate_percent,
        late_fine=late_fine,
    )


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    card_id: str = Field(default="", validation_alias=AliasChoices("card_id", "cardId", "bankId", "bank"))
    amount: Decimal = Decimal("0")
    # None is resolved to the as-of date when analysed.
    purchase_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("purchase_date", "purchaseDate", "date"),
    )
    note: str = ""

    @field_validator("id", "card_id", "note", mode="before")
    @classmethod
    def _text(cls, v: object) -> str:
        return _coerce_text(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: object) -> Decimal:
        return to_non_negative_decimal(v)

    @field_validator("purchase_date", mode="before")
    @classmethod
    def _purchase_date(cls, v: object) -> Optional[date]:
        return coerce_date(v)


class TransactionAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    card_id: str
    purchase_date: date
    cycle_end_date: date
    due_date: date
    grace_days: int
    days_left: int
    overdue_days: int = 0

    amount: Decimal
    interest: Decimal = Decimal("0.00")
    fine: Decimal = Decimal("0.00")
    total_due: Decimal

    status: StatusCategory
    progress_percent: int


class PortfolioSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = 0
    in_grace: int = 0
    due_today: int = 0
    overdue: int = 0

    total_principal: Decimal = Decimal("0.00")
    total_interest: Decimal = Decimal("0.00")
    total_fines: Decimal = Decimal("0.00")
    total_due: Decimal = Decimal("0.00")

    next_due_date: Optional[date] = None
