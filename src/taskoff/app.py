# src/taskoff/app.py

"""
Composition root.

- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the key-value store, reminder scheduler and TaskStore together,
- runs the reminder delivery loop as a long-lived service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config import Settings, get_settings
from .core.ports import NotificationSink
from .logging_setup import setup_logging
from .notifications.scheduler import ReminderScheduler, run_reminder_scheduler
from .notifications.sinks import LogNotificationSink
from .storage.kv_store import SQLiteKeyValueStore
from .storage.task_persistence import KeyValueTaskPersistence
from .tasks.task_models import comparable_now
from .tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class App:
    settings: Settings
    kv: SQLiteKeyValueStore
    scheduler: ReminderScheduler
    store: TaskStore


def create_app(*, settings: Settings | None = None, sink: NotificationSink | None = None) -> App:
    """
    Build the application from the provided settings.

    If settings is None, falls back to get_settings(). Notifications go to
    the log unless another sink is given.
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    kv = SQLiteKeyValueStore(settings.store_db_path)
    scheduler = ReminderScheduler(
        sink if sink is not None else LogNotificationSink(),
        attachment_path=settings.attachment_path,
        max_pending=settings.max_pending_reminders,
    )
    store = TaskStore(
        KeyValueTaskPersistence(kv, key=settings.tasks_key),
        scheduler,
        due_soon_window=timedelta(hours=settings.due_soon_hours),
    )

    # Pending reminders live in memory only; re-arm the ones still ahead.
    now = datetime.now()
    for task in store.active_tasks():
        if task.due_date < comparable_now(now, task.due_date):
            continue
        try:
            scheduler.schedule_reminder(task.id, task.title, task.due_date, task.is_recurring)
        except Exception:
            logger.exception("Failed to re-arm reminder task_id=%s", task.id)

    return App(settings=settings, kv=kv, scheduler=scheduler, store=store)


async def run_reminder_service(*, settings: Settings | None = None) -> None:
    """Configure logging, build the app and deliver reminders until cancelled."""
    if settings is None:
        settings = get_settings()

    setup_logging(
        log_dir=settings.data_dir,
        console_level=settings.log_level,
        file_level=settings.log_file_level,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    logger.info("Starting %s...", settings.app_name)
    app = create_app(settings=settings)
    try:
        await run_reminder_scheduler(app.scheduler, interval_seconds=settings.reminder_interval_seconds)
    finally:
        logger.info("Bye.")
