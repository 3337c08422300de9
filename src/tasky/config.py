# src/tasky/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKY"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


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

    # ---- Notifications ----
    notifications_enabled: bool
    desktop_notifications: bool
    dispatch_interval_seconds: float

    # ---- Front end ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasky") or "tasky"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), True)
        desktop_notifications = _env_bool(_k("DESKTOP_NOTIFICATIONS"), True)
        dispatch_interval_seconds = max(0.5, _env_float(_k("DISPATCH_INTERVAL_SECONDS"), 15.0))

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasky"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasky.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            notifications_enabled=notifications_enabled,
            desktop_notifications=desktop_notifications,
            dispatch_interval_seconds=dispatch_interval_seconds,
            console_enabled=console_enabled,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
