"""Configuration helpers and .env loading for mockxhr."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("config/.env"),
)

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def load_environment(*, extra_files: Iterable[Path] | None = None) -> dict[str, str]:
    """Load environment variables from .env files once per process."""

    candidates = list(DEFAULT_ENV_FILES)
    if extra_files:
        candidates = [*candidates, *extra_files]

    for path in candidates:
        try:
            if path.exists():
                load_dotenv(path, override=False)
        except OSError:
            continue

    return dict(os.environ)


def _flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _level(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"{name} must be a logging level name or number (got {value!r})")
    return level


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.WARNING
    log_json: bool = False
    log_file: Optional[Path] = None
    metrics_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        log_file = os.environ.get("MOCKXHR_LOG_FILE")
        return cls(
            log_level=_level("MOCKXHR_LOG_LEVEL", logging.WARNING),
            log_json=_flag("MOCKXHR_LOG_JSON", False),
            log_file=Path(log_file) if log_file else None,
            metrics_enabled=_flag("MOCKXHR_METRICS", True),
        )


__all__ = ["DEFAULT_ENV_FILES", "Settings", "load_environment"]
