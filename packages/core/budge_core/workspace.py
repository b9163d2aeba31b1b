"""Helpers for managing workspace paths."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_DATA_ROOT = Path("data")


def data_root() -> Path:
    root = Path(os.getenv("BUDGE_DATA_ROOT") or DEFAULT_DATA_ROOT)
    root.mkdir(parents=True, exist_ok=True)
    return root


def inputs_path() -> Path:
    path = data_root() / "inputs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def rules_path() -> Path:
    return data_root() / "rules.yaml"


def accounts_path() -> Path:
    return data_root() / "accounts.yaml"


def settings_path() -> Path:
    return data_root() / "settings.yaml"
