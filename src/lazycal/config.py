# src/lazycal/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
- Per-user preferences edited at runtime (reminder time) live in the
  preferences file, not here. Settings only supply the defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "LAZYCAL"

DEFAULT_REMINDER_TIME = "17:00"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_path: Path
    preferences_path: Path
    log_dir: Path

    # ---- Reminder ----
    reminder_enabled: bool
    default_reminder_time: str
    reminder_interval_seconds: float

    # ---- Persistence ----
    save_on_mutation: bool

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv_if_available()

        app_name = _env(_k("APP_NAME"), "lazycal")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/lazycal"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")
        preferences_path = _env_path(_k("PREFERENCES_PATH"), data_dir / "settings.json")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        reminder_enabled = _env_bool(_k("REMINDER_ENABLED"), True)
        default_reminder_time = _env(_k("REMINDER_TIME"), DEFAULT_REMINDER_TIME).strip() or DEFAULT_REMINDER_TIME
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 60.0)

        save_on_mutation = _env_bool(_k("SAVE_ON_MUTATION"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_path=tasks_path,
            preferences_path=preferences_path,
            log_dir=log_dir,
            reminder_enabled=reminder_enabled,
            default_reminder_time=default_reminder_time,
            reminder_interval_seconds=reminder_interval_seconds,
            save_on_mutation=save_on_mutation,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
