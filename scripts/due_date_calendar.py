#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path


def _ensure_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src = repo_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


def main(argv: list[str] | None = None) -> int:
    _ensure_src_on_path()
    from gracewise.grace import cycle_end_date, resolve_due_date
    from gracewise.util.dates import clamped_date

    p = argparse.ArgumentParser(
        prog="due_date_calendar",
        description=(
            "Print a year of billing cycles for a card: the last purchase day of each cycle,\n"
            "the cycle end date and the payment due date. Handy for checking short-month clamping."
        ),
    )
    p.add_argument("--year", type=int, default=date.today().year, help="Calendar year (default: current year)")
    p.add_argument("--cycle-end-day", type=int, required=True, help="Day of month the billing cycle ends (1-31)")
    p.add_argument("--due-day", type=int, required=True, help="Day of month payment is due (1-31)")
    p.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    args = p.parse_args(argv)

    for flag, day in (("--cycle-end-day", args.cycle_end_day), ("--due-day", args.due_day)):
        if not 1 <= day <= 31:
            raise SystemExit(f"{flag} must be between 1 and 31 (got {day})")

    rows = []
    for month in range(1, 13):
        last_purchase = clamped_date(args.year, month, args.cycle_end_day)
        rows.append(
            {
                "cycle_end": cycle_end_date(last_purchase, args.cycle_end_day).isoformat(),
                "due": resolve_due_date(last_purchase, args.cycle_end_day, args.due_day).isoformat(),
            }
        )

    if args.json:
        print(json.dumps({"cycles": rows}, indent=2))
        return 0

    print(f"{'cycle end':<12} due")
    for r in rows:
        print(f"{r['cycle_end']:<12} {r['due']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
