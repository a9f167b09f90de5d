# src/taskoff/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Delivered notifications (LogNotificationSink) also go to their own history file.
NOTIFICATIONS_LOGGER = "taskoff.notifications.sinks"


class _ConsoleNoiseFilter(logging.Filter):
    """Console shows taskoff records at any level, everything else (py.warnings, libraries) only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "taskoff" or record.name.startswith("taskoff."):
            return True
        return record.levelno >= logging.ERROR


def _level(name: str | int, default: int) -> int:
    if isinstance(name, int):
        return name
    value = logging.getLevelName(str(name).strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskoff",
    console_level: str | int = logging.INFO,
    file_level: str | int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> None:
    """
    Configure logging for the reminder service.

    - console: filtered, `console_level`
    - <log_dir>/taskoff.log: every record at `file_level`, rotated
    - <log_dir>/notifications.log: delivered notifications only, rotated

    Both files rotate at `max_bytes`, keeping `backup_count` old copies.
    Levels accept names ("DEBUG") or ints. Call once, before the first log record.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(_level(console_level, logging.INFO))
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = RotatingFileHandler(
        log_dir / "taskoff.log",
        maxBytes=max(0, int(max_bytes)),
        backupCount=max(0, int(backup_count)),
        encoding="utf-8",
    )
    fh.setLevel(_level(file_level, logging.DEBUG))
    fh.setFormatter(fmt)
    root.addHandler(fh)

    notifications = logging.getLogger(NOTIFICATIONS_LOGGER)
    for h in list(notifications.handlers):
        notifications.removeHandler(h)
    nh = RotatingFileHandler(
        log_dir / "notifications.log",
        maxBytes=max(0, int(max_bytes)),
        backupCount=max(0, int(backup_count)),
        encoding="utf-8",
    )
    nh.setLevel(logging.INFO)
    nh.setFormatter(logging.Formatter(fmt="%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    notifications.addHandler(nh)

    logging.captureWarnings(True)
