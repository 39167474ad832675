from .dates import clamped_date, coerce_date, parse_iso_date
from .money import money_str, round_cents, to_decimal

__all__ = ["clamped_date", "coerce_date", "parse_iso_date", "money_str", "round_cents", "to_decimal"]
