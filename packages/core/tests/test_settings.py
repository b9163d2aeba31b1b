"""Tests for workspace settings and logging helpers."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import pytest
from budge_core import ClassificationPipeline, RecordStore, Settings, get_logger, load_settings
from budge_core.logging_setup import _parse_level
from budge_core.settings import save_settings
from budge_core.workspace import accounts_path, rules_path, settings_path
from pydantic import ValidationError

REPO_ROOT = Path(__file__).resolve().parents[3]
EXAMPLES_DIR = REPO_ROOT / "examples"


def test_load_settings_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "settings.yaml")

    assert settings == Settings()
    assert settings.date_formats == ("%m/%d/%Y",)
    assert settings.read_workers == 1


def test_load_settings_reads_example_file() -> None:
    settings = load_settings(EXAMPLES_DIR / "settings.yaml")

    assert settings.read_workers == 2
    assert settings.amount_tolerance == Decimal("0.00")
    assert settings.match_min_score == 80


def test_settings_round_trip_through_yaml(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    custom = Settings(date_formats=("%d/%m/%Y",), match_window_days=5)

    save_settings(custom, path)

    assert load_settings(path) == custom


def test_settings_reject_invalid_values() -> None:
    with pytest.raises(ValidationError):
        Settings(read_workers=0)
    with pytest.raises(ValidationError):
        Settings.model_validate({"unknown_option": True})


def test_workspace_paths_follow_data_root(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BUDGE_DATA_ROOT", str(tmp_path / "ws"))

    assert settings_path() == tmp_path / "ws" / "settings.yaml"
    assert rules_path() == tmp_path / "ws" / "rules.yaml"
    assert accounts_path() == tmp_path / "ws" / "accounts.yaml"
    assert (tmp_path / "ws").is_dir()


def test_pipeline_from_settings_uses_workspace_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BUDGE_DATA_ROOT", str(tmp_path))
    (tmp_path / "rules.yaml").write_text(
        (EXAMPLES_DIR / "rules.yaml").read_text(encoding="utf-8"), encoding="utf-8"
    )
    settings = Settings(read_workers=3, match_window_days=1)

    pipeline = ClassificationPipeline.from_settings(RecordStore(), settings)

    assert pipeline.read_workers == 3
    assert pipeline.account_matcher.window_days == 1  # type: ignore[attr-defined]
    assert len(pipeline.rule_engine.rules) == 4  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    ("value", "expected"),
    [(logging.DEBUG, logging.DEBUG), ("warning", logging.WARNING), ("15", 15)],
)
def test_parse_level_accepts_names_and_numbers(value: int | str, expected: int) -> None:
    assert _parse_level(value) == expected


def test_parse_level_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUDGE_LOG_LEVEL", "ERROR")
    assert _parse_level(None) == logging.ERROR

    monkeypatch.delenv("BUDGE_LOG_LEVEL")
    assert _parse_level(None) == logging.INFO


def test_get_logger_nests_under_package_logger() -> None:
    logger = get_logger("budge.pipeline")

    assert logger.name == "budge.pipeline"
    assert logging.getLogger("budge").handlers


def test_log_level_defaults_to_environment_fallback() -> None:
    assert Settings().log_level is None
