# src/taskoff/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

DEFAULT_DUE_SOON_WINDOW = timedelta(hours=24)


class Recurrence(StrEnum):
    """How a task repeats. Anything other than NONE makes completion advance the due date."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, raw: str | None) -> Recurrence:
        if not raw:
            return cls.NONE
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NONE


class Urgency(StrEnum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    LATER = "later"


def new_task_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single reminder task.

    Instances are immutable: editors work on a copy made with
    dataclasses.replace() and hand it back to TaskStore.update().
    """

    title: str
    due_date: datetime
    recurrence: Recurrence = Recurrence.NONE
    is_completed: bool = False
    id: str = field(default_factory=new_task_id)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != Recurrence.NONE

    @property
    def is_active(self) -> bool:
        return not self.is_completed or self.is_recurring


def comparable_now(now: datetime, other: datetime) -> datetime:
    """
    Return `now` in the same naive/aware flavour as `other`.

    Naive datetimes are treated as local wall-clock time.
    """
    if (now.tzinfo is None) == (other.tzinfo is None):
        return now
    if other.tzinfo is None:
        return now.astimezone().replace(tzinfo=None)
    return now.astimezone()


def timeline_key(value: datetime) -> datetime:
    """Sort key placing naive (local wall-clock) and aware datetimes on one timeline."""
    return value if value.tzinfo is not None else value.astimezone()


def urgency_for(
    task: Task,
    now: datetime,
    *,
    due_soon_window: timedelta = DEFAULT_DUE_SOON_WINDOW,
) -> Urgency:
    now = comparable_now(now, task.due_date)
    remaining = task.due_date - now
    if remaining < timedelta(0):
        return Urgency.OVERDUE
    if remaining <= due_soon_window:
        return Urgency.DUE_SOON
    return Urgency.LATER
