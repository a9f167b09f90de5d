# src/taskoff/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from ..core.ports import Notifier, TaskPersistence
from .errors import TaskNotFoundError
from .recurrence import next_due_date
from .task_models import (
    DEFAULT_DUE_SOON_WINDOW,
    Recurrence,
    Task,
    Urgency,
    comparable_now,
    timeline_key,
    urgency_for,
)

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Owner of the task collection.

    - in-memory list is the source of truth
    - every mutation is saved synchronously through the persistence port
    - reminder requests go to the injected notifier

    Side effects (save, notifier calls) are best-effort: their failures are
    logged and never roll back the mutation that triggered them.

    Unknown ids raise TaskNotFoundError in update/toggle/delete/get.

    Thread-safety:
    - mutations are serialized by a re-entrant lock, so saves never interleave
    """

    def __init__(
            self,
            persistence: TaskPersistence,
            notifier: Notifier,
            *,
            clock: Callable[[], datetime] = datetime.now,
            due_soon_window: timedelta = DEFAULT_DUE_SOON_WINDOW,
    ) -> None:
        self._persistence = persistence
        self._notifier = notifier
        self._clock = clock
        self._due_soon_window = due_soon_window
        self._lock = threading.RLock()
        self._tasks: list[Task] = []

        self._load()
        self._check_overdue()
        logger.info("TaskStore ready total=%d active=%d", len(self._tasks), len(self.active_tasks()))

    # ---- low-level helpers ----

    def _load(self) -> None:
        try:
            tasks = self._persistence.load()
        except Exception:
            logger.exception("Failed to load tasks; starting with an empty collection.")
            tasks = []
        with self._lock:
            self._tasks = list(tasks)

    def _save(self) -> None:
        try:
            self._persistence.save(list(self._tasks))
        except Exception:
            logger.exception("Failed to save tasks (total=%d); in-memory state kept.", len(self._tasks))

    def _schedule(self, task: Task) -> None:
        try:
            self._notifier.schedule_reminder(task.id, task.title, task.due_date, task.is_recurring)
        except Exception:
            logger.exception("schedule_reminder failed task_id=%s", task.id)

    def _cancel(self, task_id: str) -> None:
        try:
            self._notifier.cancel_reminder(task_id)
        except Exception:
            logger.exception("cancel_reminder failed task_id=%s", task_id)

    def _index_of(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        raise TaskNotFoundError(task_id)

    def _check_overdue(self) -> None:
        """One-shot alert for every open, non-recurring task already past its due date."""
        now = self._clock()
        for task in list(self._tasks):
            if task.is_completed or task.is_recurring:
                continue
            if task.due_date >= comparable_now(now, task.due_date):
                continue
            try:
                self._notifier.fire_overdue_alert(task.id, task.title)
            except Exception:
                logger.exception("fire_overdue_alert failed task_id=%s", task.id)

    @staticmethod
    def _validate(task: Task) -> Task:
        if not isinstance(task.due_date, datetime):
            raise ValueError(f"due_date must be a datetime, got {type(task.due_date).__name__}")
        if not isinstance(task.recurrence, Recurrence):
            raise ValueError(f"recurrence must be a Recurrence, got {task.recurrence!r}")
        if task.is_recurring and task.is_completed:
            # Recurring tasks are never permanently completed.
            return replace(task, is_completed=False)
        return task

    # ---- public API ----

    @property
    def tasks(self) -> list[Task]:
        with self._lock:
            return list(self._tasks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return any(t.id == task_id for t in self._tasks)

    def get(self, task_id: str) -> Task:
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def add(self, title: str, due_date: datetime, recurrence: Recurrence = Recurrence.NONE) -> Task:
        task = self._validate(Task(title=title, due_date=due_date, recurrence=Recurrence(recurrence)))
        with self._lock:
            self._tasks.append(task)
            self._save()
        logger.debug("Task added id=%s due=%s recurrence=%s", task.id, task.due_date, task.recurrence)
        self._schedule(task)
        return task

    def update(self, task: Task) -> Task:
        task = self._validate(task)
        with self._lock:
            index = self._index_of(task.id)
            self._tasks[index] = task
            self._save()
        logger.debug("Task updated id=%s due=%s recurrence=%s", task.id, task.due_date, task.recurrence)
        if task.is_active:
            self._schedule(task)
        else:
            self._cancel(task.id)
        return task

    def toggle(self, task_id: str) -> Task:
        """
        Complete/uncomplete a task.

        - recurrence none: is_completed flips; completing cancels the pending
          reminder, re-opening schedules it again
        - recurring: is_completed stays False, due_date advances one step
          and a reminder is scheduled for the new date
        """
        with self._lock:
            index = self._index_of(task_id)
            current = self._tasks[index]
            if current.is_recurring:
                toggled = replace(
                    current,
                    is_completed=False,
                    due_date=next_due_date(current.due_date, current.recurrence),
                )
            else:
                toggled = replace(current, is_completed=not current.is_completed)
            self._tasks[index] = toggled
            self._save()

        if toggled.is_recurring:
            logger.info("Task %s advanced -> %s", task_id, toggled.due_date)
            self._schedule(toggled)
        elif toggled.is_completed:
            logger.info("Task %s -> completed", task_id)
            self._cancel(task_id)
        else:
            logger.info("Task %s -> pending", task_id)
            self._schedule(toggled)
        return toggled

    def delete(self, task_id: str) -> Task:
        with self._lock:
            index = self._index_of(task_id)
            removed = self._tasks.pop(index)
            self._save()
        self._cancel(task_id)
        logger.info("Task deleted id=%s", task_id)
        return removed

    def active_tasks(self) -> list[Task]:
        """Open or recurring tasks, ascending by due date."""
        with self._lock:
            active = [t for t in self._tasks if t.is_active]
        return sorted(active, key=lambda t: timeline_key(t.due_date))

    def urgency(self, task: Task, now: datetime | None = None) -> Urgency:
        return urgency_for(
            task,
            self._clock() if now is None else now,
            due_soon_window=self._due_soon_window,
        )
