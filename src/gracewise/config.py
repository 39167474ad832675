from __future__ import annotations

import os
import re
from decimal import Decimal
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .datafile import default_data_path
from .models import DEFAULT_CYCLE_END_DAY, DEFAULT_DUE_DAY, Card, default_card


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _expand_env_vars(value: object) -> object:
    if isinstance(value, str):
        def repl(match: re.Match[str]) -> str:
            var = match.group(1)
            return os.getenv(var, "")

        return _ENV_VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    return value


def _deep_merge(base: object, override: object) -> object:
    if isinstance(base, dict) and isinstance(override, dict):
        out = dict(base)
        for k, v in override.items():
            if k in out:
                out[k] = _deep_merge(out[k], v)
            else:
                out[k] = v
        return out
    return override


def _default_config_from_env() -> dict:
    """
    Env-only config so most users only need `.env`; YAML is an optional override.
    """
    return {
        "user": {
            "id": os.getenv("GRACEWISE_USER", "guest"),
        },
        "data": {
            "path": os.getenv("GRACEWISE_DATA_FILE", ""),
            "dir": os.getenv("GRACEWISE_DATA_DIR", "data"),
        },
        "defaults": {
            "cycle_end_day": os.getenv("GRACEWISE_DEFAULT_CYCLE_END_DAY", str(DEFAULT_CYCLE_END_DAY)),
            "due_day": os.getenv("GRACEWISE_DEFAULT_DUE_DAY", str(DEFAULT_DUE_DAY)),
            "annual_rate_percent": os.getenv("GRACEWISE_DEFAULT_ANNUAL_RATE", "0"),
            "late_fine": os.getenv("GRACEWISE_DEFAULT_LATE_FINE", "0"),
        },
        "display": {
            "currency": os.getenv("GRACEWISE_CURRENCY", "EGP"),
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL", "INFO"),
            "file_path": os.getenv("LOG_FILE", ""),
        },
    }


class UserConfig(BaseModel):
    id: str = "guest"

    @field_validator("id")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip() or "guest"


class DataConfig(BaseModel):
    # Empty path means data/gracewise_<user>.json under `dir`.
    path: str = ""
    dir: str = "data"


class DefaultCardConfig(BaseModel):
    """
    Billing configuration used when a transaction references a card that does not exist.
    """

    cycle_end_day: int = Field(default=DEFAULT_CYCLE_END_DAY, ge=1, le=31)
    due_day: int = Field(default=DEFAULT_DUE_DAY, ge=1, le=31)
    annual_rate_percent: Decimal = Field(default=Decimal("0"), ge=0)
    late_fine: Decimal = Field(default=Decimal("0"), ge=0)

    def to_card(self) -> Card:
        return default_card(
            cycle_end_day=self.cycle_end_day,
            due_day=self.due_day,
            annual_rate_percent=self.annual_rate_percent,
            late_fine=self.late_fine,
        )


class DisplayConfig(BaseModel):
    currency: str = "EGP"

    @field_validator("currency")
    @classmethod
    def _currency(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if not v:
            raise ValueError("display.currency must not be empty (e.g. 'EGP', 'USD')")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_path: str = ""


class AppConfig(BaseModel):
    user: UserConfig = UserConfig()
    data: DataConfig = DataConfig()
    defaults: DefaultCardConfig = DefaultCardConfig()
    display: DisplayConfig = DisplayConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_keys(cls, data: object) -> object:
        # Early configs had a flat `currency:` key.
        if isinstance(data, dict) and "currency" in data:
            data = dict(data)
            currency = data.pop("currency")
            display = dict(data.get("display") or {})
            display["currency"] = currency
            data["display"] = display
        return data

    def data_path(self) -> Path:
        if self.data.path.strip():
            return Path(self.data.path.strip())
        return default_data_path(self.user.id, data_dir=self.data.dir)


def load_config(path: Union[str, Path, None] = None) -> AppConfig:
    raw: dict = {}
    if path:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            raw = _expand_env_vars(raw)  # supports ${ENV_VAR} in YAML

    merged = _deep_merge(_default_config_from_env(), raw)
    return AppConfig.model_validate(merged)
