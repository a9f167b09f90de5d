# src/taskoff/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task engine.

TaskStore depends on Protocols instead of concrete implementations.
This keeps storage and notification backends swappable and makes testing easier.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..notifications.reminders import Notification
    from ..tasks.task_models import Task


class KeyValueStore(Protocol):
    """Local key-value storage holding opaque string values."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class TaskPersistence(Protocol):
    """
    Load/save port for the whole task collection.

    Implementations raise PersistenceError on any serialization or I/O failure.
    """

    def load(self) -> list[Task]: ...
    def save(self, tasks: Sequence[Task]) -> None: ...


class Notifier(Protocol):
    """
    Notification-side port: how TaskStore asks for reminders.

    The notifier decides how a request is delivered. Re-issuing
    schedule_reminder() for the same task_id replaces the previous request.
    Implementations raise SchedulingError when a request cannot be fulfilled.
    """

    def schedule_reminder(
            self,
            task_id: str,
            title: str,
            fire_at: datetime,
            repeating: bool,
    ) -> None: ...

    def cancel_reminder(self, task_id: str) -> None: ...

    def fire_overdue_alert(self, task_id: str, title: str) -> None: ...


class NotificationSink(Protocol):
    """Where delivered notifications end up (OS notification center, log, ...)."""

    def deliver(self, notification: Notification) -> None: ...
