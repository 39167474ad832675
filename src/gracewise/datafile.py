from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from .models import Card, Transaction


logger = logging.getLogger(__name__)

_USER_SLUG_RE = re.compile(r"[^a-z0-9@._-]+")


def user_slug(user_id: str) -> str:
    slug = _USER_SLUG_RE.sub("_", (user_id or "").strip().lower()).strip("_")
    return slug or "guest"


def default_data_path(user_id: str, data_dir: str = "data") -> Path:
    return Path(data_dir) / f"gracewise_{user_slug(user_id)}.json"


@dataclass
class DataFile:
    """
    One user's exported records. Raw dicts are kept as-is so fields this package does
    not know about survive an import/merge/export cycle.
    """

    banks: list[dict[str, Any]] = field(default_factory=list)
    transactions: list[dict[str, Any]] = field(default_factory=list)
    exported_at: Optional[str] = None

    def cards(self) -> list[Card]:
        return [Card.model_validate(b) for b in self.banks]

    def parsed_transactions(self) -> list[Transaction]:
        return [Transaction.model_validate(t) for t in self.transactions]


def _dict_items(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [dict(v) for v in value if isinstance(v, dict)]


def load_data_file(path: Path) -> DataFile:
    """
    Load a data file from disk.
    If the JSON is corrupt, quarantine it as `.bad` and return an empty DataFile.
    """
    if not path.exists():
        return DataFile()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("data file root must be an object")
    except (OSError, ValueError):
        try:
            bad = path.with_suffix(path.suffix + ".bad")
            path.replace(bad)
            logger.warning("Invalid data file JSON; quarantined to %s", bad)
        except OSError:
            logger.debug("Failed to quarantine invalid data file.", exc_info=True)
        return DataFile()

    return DataFile(
        banks=_dict_items(raw.get("banks")),
        transactions=_dict_items(raw.get("transactions")),
        exported_at=str(raw.get("exportedAt") or "") or None,
    )


def save_data_file(path: Path, data: DataFile) -> Path:
    """
    Write `{banks, transactions, exportedAt}` atomically, keeping the previous file as `.bak`.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    exported_at = datetime.now(timezone.utc).isoformat()
    payload = {
        "banks": data.banks,
        "transactions": data.transactions,
        "exportedAt": exported_at,
    }

    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")

    if path.exists():
        bak = path.with_name(path.name + ".bak")
        try:
            bak.write_bytes(path.read_bytes())
        except OSError:
            logger.debug("Failed to write data file backup.", exc_info=True)

    tmp.replace(path)
    data.exported_at = exported_at
    return path


def merge_records(remote: Iterable[dict[str, Any]], local: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Union of two record lists keyed by `id`.

    Remote order is kept; a local record with the same id replaces the remote one, and
    local-only records are appended. Records without an id are always kept.
    """
    merged = [dict(r) for r in remote]
    index = {str(r.get("id")): i for i, r in enumerate(merged) if r.get("id")}

    for rec in local:
        rid = str(rec.get("id") or "")
        if rid and rid in index:
            merged[index[rid]] = dict(rec)
            continue
        merged.append(dict(rec))
        if rid:
            index[rid] = len(merged) - 1
    return merged


def merge_data_files(remote: DataFile, local: DataFile) -> DataFile:
    return DataFile(
        banks=merge_records(remote.banks, local.banks),
        transactions=merge_records(remote.transactions, local.transactions),
    )
