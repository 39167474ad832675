"""
Card form validation.

The calculator itself accepts anything; these checks are what the entry layer runs before
a card is saved, so users get field-level messages instead of silently defaulted values.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from .util.dates import coerce_date
from .util.money import to_decimal


logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3

_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _day_of_month(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _check_non_negative(field: str, value: object, label: str) -> Optional[FieldError]:
    # Empty means 0, like the form.
    if _blank(value):
        return None
    dec = to_decimal(value, default=None)
    if dec is None or dec < 0:
        return FieldError(field, f"{label} must be ≥ 0")
    return None


def validate_card_fields(
    *,
    name: object,
    cycle_end: object,
    due: object,
    annual_rate: object = None,
    daily_rate: object = None,
    fine: object = None,
) -> list[FieldError]:
    """
    Return field errors in form order (the first one is where a UI should focus).

    `cycle_end` / `due` may be full dates ("2024-01-21") or day-of-month numbers.
    Two full dates must be ordered; with day numbers the due day always falls in the
    following month, so any pair in 1..31 is valid.
    """
    errors: list[FieldError] = []

    if _blank(name) or len(str(name).strip()) < MIN_NAME_LENGTH:
        errors.append(FieldError("name", f"Card name is required ({MIN_NAME_LENGTH}+ chars)"))

    end_day = _day_of_month(cycle_end)
    due_day = _day_of_month(due)
    end_date: Optional[date] = None if end_day is not None else coerce_date(cycle_end)
    due_date: Optional[date] = None if due_day is not None else coerce_date(due)

    if end_day is None and end_date is None:
        errors.append(FieldError("cycle_end", "Pick cycle end date"))
    elif end_day is not None and not 1 <= end_day <= 31:
        errors.append(FieldError("cycle_end", "Cycle end day must be between 1 and 31"))

    if due_day is None and due_date is None:
        errors.append(FieldError("due", "Pick due date"))
    elif due_day is not None and not 1 <= due_day <= 31:
        errors.append(FieldError("due", "Due day must be between 1 and 31"))

    if end_date is not None and due_date is not None and due_date <= end_date:
        errors.append(FieldError("due", "Due date must be after cycle end"))

    for field, value, label in (
        ("annual_rate", annual_rate, "Annual rate"),
        ("daily_rate", daily_rate, "Daily rate"),
        ("fine", fine, "Late fine"),
    ):
        err = _check_non_negative(field, value, label)
        if err:
            errors.append(err)

    return errors


def validate_card_record(record: dict[str, Any]) -> list[FieldError]:
    """Validate a stored card dict (any of the accepted key spellings)."""

    def pick(*keys: str) -> object:
        for k in keys:
            if k in record:
                return record[k]
        return None

    return validate_card_fields(
        name=pick("name"),
        cycle_end=pick("cycle_end_day", "cycleEndDay", "end"),
        due=pick("due_day", "dueDay", "due"),
        annual_rate=pick("annual_rate_percent", "annualRatePercent", "rate"),
        daily_rate=pick("daily_rate_percent", "dailyRatePercent", "daily"),
        fine=pick("late_fine", "lateFine", "fine"),
    )


def new_record_id(length: int = 7) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def upsert_card(cards: Iterable[dict[str, Any]], payload: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Save a card record into a list of stored cards.

    A card with the same name (case-insensitive) is replaced in place and keeps its id;
    otherwise the payload is appended under a fresh id.
    """
    out = [dict(c) for c in cards]
    name = str(payload.get("name") or "").strip()
    record = dict(payload)
    record["name"] = name

    for idx, existing in enumerate(out):
        if str(existing.get("name") or "").strip().casefold() == name.casefold():
            record["id"] = existing.get("id") or new_record_id()
            out[idx] = record
            logger.debug("Updated card id=%s name=%r", record["id"], name)
            return out

    record["id"] = record.get("id") or new_record_id()
    out.append(record)
    logger.debug("Added card id=%s name=%r", record["id"], name)
    return out
