from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from gracewise.models import Card  # noqa: E402


@pytest.fixture
def card() -> Card:
    """Cycle ends on the 21st, payment due on the 15th, 36% a year, 100 late fine."""
    return Card(
        id="cib",
        name="CIB Platinum",
        cycle_end_day=21,
        due_day=15,
        annual_rate_percent=Decimal("36"),
        late_fine=Decimal("100"),
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "GRACEWISE_USER",
        "GRACEWISE_DATA_FILE",
        "GRACEWISE_DATA_DIR",
        "GRACEWISE_DEFAULT_CYCLE_END_DAY",
        "GRACEWISE_DEFAULT_DUE_DAY",
        "GRACEWISE_DEFAULT_ANNUAL_RATE",
        "GRACEWISE_DEFAULT_LATE_FINE",
        "GRACEWISE_CURRENCY",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
