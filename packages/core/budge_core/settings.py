"""Runtime settings loaded from the workspace."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Optional

import yaml
from budge_schemas.records import FrozenModel
from pydantic import Field

from .workspace import settings_path

DEFAULT_TRANSFER_BOILERPLATE: tuple[str, ...] = (
    "- -SCU Mobile/",
    "Home Banking Transfer/",
    "/-SCU Mobile",
)


class Settings(FrozenModel):
    """Tunables for ingestion, transfer cleanup and account matching."""

    date_formats: tuple[str, ...] = ("%m/%d/%Y",)
    read_workers: int = Field(default=1, ge=1)
    transfer_boilerplate: tuple[str, ...] = DEFAULT_TRANSFER_BOILERPLATE
    leading_separator: str = "- "
    match_window_days: int = Field(default=3, ge=0)
    amount_tolerance: Decimal = Field(default=Decimal("0.00"), ge=0)
    match_min_score: int = Field(default=80, ge=0, le=100)
    log_level: Optional[str] = None


def load_settings(path: Optional[Path] = None) -> Settings:
    path = path or settings_path()
    if not path.exists():
        return Settings()
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw:
        return Settings()
    return Settings.model_validate(raw)


def save_settings(settings: Settings, path: Optional[Path] = None) -> None:
    path = path or settings_path()
    payload = settings.model_dump(mode="json")
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


__all__ = ["DEFAULT_TRANSFER_BOILERPLATE", "Settings", "load_settings", "save_settings"]
