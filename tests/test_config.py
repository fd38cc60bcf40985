from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mockxhr.config import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("MOCKXHR_LOG_LEVEL", "MOCKXHR_LOG_JSON", "MOCKXHR_LOG_FILE", "MOCKXHR_METRICS"):
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults() -> None:
    settings = Settings.from_env()

    assert settings.log_level == logging.WARNING
    assert settings.log_json is False
    assert settings.log_file is None
    assert settings.metrics_enabled is True


def test_settings_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MOCKXHR_LOG_LEVEL", "debug")
    monkeypatch.setenv("MOCKXHR_LOG_JSON", "yes")
    monkeypatch.setenv("MOCKXHR_LOG_FILE", str(tmp_path / "mockxhr.log"))
    monkeypatch.setenv("MOCKXHR_METRICS", "off")

    settings = Settings.from_env()

    assert settings.log_level == logging.DEBUG
    assert settings.log_json is True
    assert settings.log_file == tmp_path / "mockxhr.log"
    assert settings.metrics_enabled is False


def test_numeric_log_level(monkeypatch) -> None:
    monkeypatch.setenv("MOCKXHR_LOG_LEVEL", "15")
    assert Settings.from_env().log_level == 15


def test_invalid_log_level(monkeypatch) -> None:
    monkeypatch.setenv("MOCKXHR_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="MOCKXHR_LOG_LEVEL"):
        Settings.from_env()
