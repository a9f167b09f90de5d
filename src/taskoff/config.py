# src/taskoff/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Everything local: the data directory holds the key-value store and logs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKOFF"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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


def _env_optional_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    tasks_key: str

    # ---- Notifications ----
    attachment_path: Path | None
    due_soon_hours: float
    reminder_interval_seconds: float
    max_pending_reminders: int

    # ---- Log files ----
    log_file_level: str = "DEBUG"
    log_max_bytes: int = 1_000_000
    log_backup_count: int = 3

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Task Off")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskoff"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")
        tasks_key = _env(_k("TASKS_KEY"), "tasks").strip() or "tasks"

        attachment_path = _env_optional_path(_k("ATTACHMENT_PATH"))
        due_soon_hours = _env_float(_k("DUE_SOON_HOURS"), 24.0)
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 15.0)
        max_pending_reminders = _env_int(_k("MAX_PENDING_REMINDERS"), 64)

        log_file_level = _env(_k("LOG_FILE_LEVEL"), "DEBUG")
        log_max_bytes = _env_int(_k("LOG_MAX_BYTES"), 1_000_000)
        log_backup_count = _env_int(_k("LOG_BACKUP_COUNT"), 3)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_db_path=store_db_path,
            tasks_key=tasks_key,
            attachment_path=attachment_path,
            due_soon_hours=due_soon_hours,
            reminder_interval_seconds=reminder_interval_seconds,
            max_pending_reminders=max_pending_reminders,
            log_file_level=log_file_level,
            log_max_bytes=log_max_bytes,
            log_backup_count=log_backup_count,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
