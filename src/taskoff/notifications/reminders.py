# src/taskoff/notifications/reminders.py

from __future__ import annotations

"""
Reminder request construction.

Turns a (task_id, title, fire_at) triple into the notification payload that a
notifier schedules or delivers. Delivery itself belongs to the sink.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Task Reminder"
OVERDUE_TITLE = "Overdue Task"
OVERDUE_ID_PREFIX = "overdue-"


@dataclass(slots=True, frozen=True)
class Notification:
    identifier: str
    task_id: str
    title: str
    body: str
    attachment: Path | None = None


@dataclass(slots=True, frozen=True)
class ReminderRequest:
    """
    A pending reminder.

    trigger_at is minute-resolution (calendar matching on y/m/d/h/m).
    """

    notification: Notification
    trigger_at: datetime
    repeating: bool

    @property
    def identifier(self) -> str:
        return self.notification.identifier


def overdue_alert_id(task_id: str) -> str:
    return f"{OVERDUE_ID_PREFIX}{task_id}"


def resolve_attachment(path: str | Path | None) -> Path | None:
    """Return the attachment path if the resource exists; a missing resource is not an error."""
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        logger.warning("Notification attachment not found: %s", p)
        return None
    return p


def build_reminder_request(
        task_id: str,
        title: str,
        fire_at: datetime,
        repeating: bool,
        *,
        attachment: Path | None = None,
) -> ReminderRequest:
    notification = Notification(
        identifier=task_id,
        task_id=task_id,
        title=REMINDER_TITLE,
        body=f"Don't forget: {title}",
        attachment=attachment,
    )
    return ReminderRequest(
        notification=notification,
        trigger_at=fire_at.replace(second=0, microsecond=0),
        repeating=repeating,
    )


def build_overdue_alert(task_id: str, title: str) -> Notification:
    return Notification(
        identifier=overdue_alert_id(task_id),
        task_id=task_id,
        title=OVERDUE_TITLE,
        body=f"The task {title} is overdue.",
    )
