# src/taskoff/notifications/scheduler.py

from __future__ import annotations

"""
In-process reminder scheduler.

Implements the Notifier port:
- keeps pending reminder requests keyed by identifier (re-scheduling replaces),
- delivers overdue alerts immediately,
- a small polling loop delivers due reminders via an injected sink.

How a notification is shown (OS center, log, chat) belongs to the sink, not the scheduler.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..core.ports import NotificationSink
from ..tasks.errors import SchedulingError
from ..tasks.task_models import comparable_now, timeline_key
from .reminders import (
    ReminderRequest,
    build_overdue_alert,
    build_reminder_request,
    overdue_alert_id,
    resolve_attachment,
)

logger = logging.getLogger(__name__)

# iOS keeps at most 64 pending local notifications per app.
DEFAULT_MAX_PENDING = 64


class ReminderScheduler:
    def __init__(
            self,
            sink: NotificationSink,
            *,
            attachment_path: str | Path | None = None,
            max_pending: int = DEFAULT_MAX_PENDING,
            clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._sink = sink
        self._attachment_path = attachment_path
        self._max_pending = max(1, int(max_pending))
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: dict[str, ReminderRequest] = {}
        # identifier -> trigger already delivered (repeating requests only)
        self._delivered: dict[str, datetime] = {}

    # ---- Notifier port ----

    def schedule_reminder(
            self,
            task_id: str,
            title: str,
            fire_at: datetime,
            repeating: bool,
    ) -> None:
        if not isinstance(fire_at, datetime):
            raise SchedulingError(f"fire_at must be a datetime, got {type(fire_at).__name__}")

        request = build_reminder_request(
            task_id,
            title,
            fire_at,
            repeating,
            attachment=resolve_attachment(self._attachment_path),
        )

        with self._lock:
            if request.identifier not in self._pending and len(self._pending) >= self._max_pending:
                raise SchedulingError(
                    f"Pending reminder limit reached ({self._max_pending}); task_id={task_id}"
                )
            self._pending[request.identifier] = request
            self._delivered.pop(request.identifier, None)

        logger.debug(
            "Reminder scheduled id=%s trigger_at=%s repeating=%s",
            request.identifier,
            request.trigger_at,
            repeating,
        )

    def cancel_reminder(self, task_id: str) -> None:
        with self._lock:
            for identifier in (task_id, overdue_alert_id(task_id)):
                self._pending.pop(identifier, None)
                self._delivered.pop(identifier, None)
        logger.debug("Reminder cancelled task_id=%s", task_id)

    def fire_overdue_alert(self, task_id: str, title: str) -> None:
        notification = build_overdue_alert(task_id, title)
        try:
            self._sink.deliver(notification)
        except Exception as e:
            raise SchedulingError(f"Overdue alert delivery failed task_id={task_id}") from e
        logger.info("Overdue alert delivered task_id=%s", task_id)

    # ---- inspection ----

    def pending(self) -> list[ReminderRequest]:
        with self._lock:
            requests = list(self._pending.values())
        return sorted(requests, key=lambda r: timeline_key(r.trigger_at))

    def get(self, identifier: str) -> ReminderRequest | None:
        with self._lock:
            return self._pending.get(identifier)

    # ---- delivery ----

    def due_requests(self, now: datetime) -> list[ReminderRequest]:
        """Requests whose trigger is due and that were not delivered for that trigger yet."""
        with self._lock:
            out = [
                r
                for r in self._pending.values()
                if r.trigger_at <= comparable_now(now, r.trigger_at)
                and self._delivered.get(r.identifier) != r.trigger_at
            ]
        return sorted(out, key=lambda r: timeline_key(r.trigger_at))

    def _mark_delivered(self, request: ReminderRequest) -> None:
        with self._lock:
            if self._pending.get(request.identifier) is not request:
                # Replaced or cancelled while being delivered.
                return
            if request.repeating:
                self._delivered[request.identifier] = request.trigger_at
            else:
                del self._pending[request.identifier]

    def deliver_due(self, now: datetime | None = None) -> int:
        """
        Deliver every due request once.

        One-shot requests are dropped after delivery; repeating ones stay
        pending until replaced or cancelled. A failed delivery is retried on
        the next call.
        """
        if now is None:
            now = self._clock()

        delivered = 0
        for request in self.due_requests(now):
            try:
                self._sink.deliver(request.notification)
            except Exception:
                logger.exception("Reminder delivery failed id=%s", request.identifier)
                continue
            self._mark_delivered(request)
            delivered += 1
            logger.info("Reminder delivered id=%s", request.identifier)
        return delivered


async def run_reminder_scheduler(
        scheduler: ReminderScheduler,
        *,
        interval_seconds: float = 15.0,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds deliver the reminders that are due.
    To stop the loop, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            scheduler.deliver_due()
        except Exception:
            logger.exception("deliver_due failed")

        await asyncio.sleep(sleep_s)
