from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import AppConfig, load_config
from .datafile import load_data_file, merge_data_files, save_data_file
from .grace import analyze_all, resolve_due_date, summarize
from .logging_config import configure_logging
from .models import Card, StatusCategory, TransactionAnalysis
from .rates import rates_consistent
from .util.dates import parse_iso_date
from .util.money import money_str
from .validation import validate_card_record


logger = logging.getLogger("gracewise")


_STATUS_LABELS = {
    StatusCategory.IN_GRACE: "in grace",
    StatusCategory.DUE_TODAY: "due today",
    StatusCategory.OVERDUE: "overdue",
}


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gracewise")
    p.add_argument(
        "--env-file",
        default=".env",
        help="Path to a dotenv file (default: .env). If missing, env vars must already be set.",
    )
    p.add_argument("--config", default="config.yaml", help="Path to YAML config (default: config.yaml, optional)")

    sub = p.add_subparsers(dest="cmd", required=True)

    due = sub.add_parser("due-date", help="Show the cycle end and payment due date for a purchase date")
    due.add_argument("--purchase", default="", help="Purchase date (YYYY-MM-DD). Default: today.")
    due.add_argument("--cycle-end-day", type=int, required=True, help="Day of month the billing cycle ends (1-31)")
    due.add_argument("--due-day", type=int, required=True, help="Day of month payment is due, next month (1-31)")

    analyze = sub.add_parser("analyze", help="Grace status, interest and fines for every transaction in a data file")
    analyze.add_argument("--data", default="", help="Data file path (default: data/gracewise_<user>.json)")
    analyze.add_argument("--as-of", default="", help="Evaluate as of this date (YYYY-MM-DD). Default: today.")
    analyze.add_argument("--json", action="store_true", help="Print machine-readable JSON instead of a table")

    validate = sub.add_parser("validate", help="Check stored cards the way the card form does")
    validate.add_argument("--data", default="", help="Data file path (default: data/gracewise_<user>.json)")

    merge = sub.add_parser(
        "merge",
        help="Merge two data files by record id (LOCAL wins on conflicts) and write the result",
    )
    merge.add_argument("local", help="Local data file")
    merge.add_argument("remote", help="Remote/backup data file")
    merge.add_argument("--out", default="", help="Output path (default: overwrite LOCAL, keeping LOCAL.bak)")

    return p


def _parse_date_arg(value: str, flag: str) -> Optional[date]:
    if not (value or "").strip():
        return None
    try:
        return parse_iso_date(value)
    except (ValueError, OverflowError):
        raise SystemExit(f"{flag} must be a date like 2024-01-31 (got {value!r})")


def _data_path(cfg: AppConfig, override: str) -> Path:
    return Path(override) if override.strip() else cfg.data_path()


def _analysis_row(a: TransactionAnalysis, currency: str) -> str:
    return (
        f"{a.transaction_id or '-':<10} {a.card_id or '-':<10} {a.purchase_date.isoformat()} "
        f"{a.due_date.isoformat()} {a.days_left:>5} {a.progress_percent:>3}% "
        f"{_STATUS_LABELS[a.status]:<9} {money_str(a.total_due, currency)}"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    env_path = Path(args.env_file)
    if env_path.exists():
        load_dotenv(env_path)

    # Default logging: can be overridden once config is loaded.
    configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))

    cfg = load_config(args.config)
    configure_logging(level=cfg.logging.level, file_path=cfg.logging.file_path or None)

    if args.cmd == "due-date":
        purchase = _parse_date_arg(args.purchase, "--purchase") or date.today()
        for flag, day in (("--cycle-end-day", args.cycle_end_day), ("--due-day", args.due_day)):
            if not 1 <= day <= 31:
                raise SystemExit(f"{flag} must be between 1 and 31 (got {day})")
        due = resolve_due_date(purchase, args.cycle_end_day, args.due_day)
        print(f"Purchase:  {purchase.isoformat()}")
        print(f"Due date:  {due.isoformat()} ({(due - purchase).days} grace days)")
        return 0

    if args.cmd == "analyze":
        as_of = _parse_date_arg(args.as_of, "--as-of") or date.today()
        path = _data_path(cfg, args.data)
        data = load_data_file(path)
        logger.info(
            "Analyzing %d transactions against %d cards (data=%s as_of=%s)",
            len(data.transactions),
            len(data.banks),
            path,
            as_of.isoformat(),
        )

        analyses = analyze_all(data.transactions, data.banks, as_of=as_of, default=cfg.defaults.to_card())
        summary = summarize(analyses)

        if args.json:
            out = {
                "as_of": as_of.isoformat(),
                "transactions": [a.model_dump(mode="json") for a in analyses],
                "summary": summary.model_dump(mode="json"),
            }
            print(json.dumps(out, indent=2))
            return 0

        if not analyses:
            print("No transactions found.")
            return 0

        currency = cfg.display.currency
        print(f"{'txn':<10} {'card':<10} {'purchased':<10} {'due':<10} {'left':>5} {'prog':>4} {'status':<9} total")
        for a in analyses:
            print(_analysis_row(a, currency))
        print()
        print(
            f"{summary.count} transactions: {summary.in_grace} in grace, {summary.due_today} due today, "
            f"{summary.overdue} overdue"
        )
        print(f"Interest: {money_str(summary.total_interest, currency)}  Fines: {money_str(summary.total_fines, currency)}")
        print(f"Total due: {money_str(summary.total_due, currency)}")
        if summary.next_due_date:
            print(f"Next due date: {summary.next_due_date.isoformat()}")
        return 0

    if args.cmd == "validate":
        path = _data_path(cfg, args.data)
        data = load_data_file(path)
        failed = 0
        for bank in data.banks:
            errors = validate_card_record(bank)
            label = bank.get("name") or bank.get("id") or "(unnamed)"
            card = Card.model_validate(bank)
            if card.daily_rate_percent is not None and not rates_consistent(
                card.annual_rate_percent, card.daily_rate_percent
            ):
                print(f"⚠️  {label}: daily rate {card.daily_rate_percent} does not match annual {card.annual_rate_percent}/365")
            if not errors:
                continue
            failed += 1
            print(f"❌ {label}")
            for err in errors:
                print(f"   - {err.field}: {err.message}")
        if failed:
            logger.warning("%d of %d cards failed validation", failed, len(data.banks))
            return 1
        print(f"✅ {len(data.banks)} cards OK")
        return 0

    if args.cmd == "merge":
        local_path = Path(args.local)
        local = load_data_file(local_path)
        remote = load_data_file(Path(args.remote))
        merged = merge_data_files(remote, local)
        out_path = Path(args.out) if args.out else local_path
        save_data_file(out_path, merged)
        logger.info(
            "Merged %d cards, %d transactions -> %s",
            len(merged.banks),
            len(merged.transactions),
            out_path,
        )
        return 0

    raise SystemExit(f"Unknown command: {args.cmd}")
