# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from taskoff.notifications.reminders import build_overdue_alert, build_reminder_request
from taskoff.notifications.scheduler import ReminderScheduler, run_reminder_scheduler
from taskoff.notifications.sinks import LogNotificationSink
from taskoff.storage.task_persistence import KeyValueTaskPersistence
from taskoff.tasks.errors import SchedulingError
from taskoff.tasks.task_store import TaskStore

from .fakes import FakeKeyValueStore, FakeSink

T0 = datetime(2024, 1, 15, 9, 0)


def test_reminder_payload() -> None:
    request = build_reminder_request("t1", "Pay rent", datetime(2024, 1, 15, 9, 0, 42, 5), True)
    assert request.identifier == "t1"
    assert request.notification.title == "Task Reminder"
    assert request.notification.body == "Don't forget: Pay rent"
    assert request.trigger_at == datetime(2024, 1, 15, 9, 0)
    assert request.repeating is True

    alert = build_overdue_alert("t1", "Pay rent")
    assert alert.identifier == "overdue-t1"
    assert alert.title == "Overdue Task"
    assert alert.body == "The task Pay rent is overdue."


def test_rescheduling_replaces_previous_request() -> None:
    scheduler = ReminderScheduler(FakeSink())
    scheduler.schedule_reminder("t1", "Old", T0, False)
    scheduler.schedule_reminder("t1", "New", T0 + timedelta(days=1), False)

    pending = scheduler.pending()
    assert len(pending) == 1
    assert pending[0].notification.body == "Don't forget: New"
    assert pending[0].trigger_at == T0 + timedelta(days=1)


def test_deliver_due_one_shot_fires_once() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink)
    scheduler.schedule_reminder("t1", "Walk dog", T0, False)
    scheduler.schedule_reminder("t2", "Later", T0 + timedelta(hours=1), False)

    assert scheduler.deliver_due(T0 - timedelta(minutes=1)) == 0
    assert scheduler.deliver_due(T0) == 1
    assert scheduler.deliver_due(T0 + timedelta(minutes=5)) == 0

    assert [n.identifier for n in sink.delivered] == ["t1"]
    assert scheduler.get("t1") is None
    assert scheduler.get("t2") is not None


def test_repeating_request_stays_pending_until_replaced() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink)
    scheduler.schedule_reminder("t1", "Gym", T0, True)

    assert scheduler.deliver_due(T0) == 1
    assert scheduler.deliver_due(T0 + timedelta(hours=1)) == 0
    assert scheduler.get("t1") is not None

    scheduler.schedule_reminder("t1", "Gym", T0 + timedelta(days=1), True)
    assert scheduler.deliver_due(T0 + timedelta(days=1)) == 1
    assert len(sink.delivered) == 2


def test_failed_delivery_is_retried() -> None:
    sink = FakeSink(fail=True)
    scheduler = ReminderScheduler(sink)
    scheduler.schedule_reminder("t1", "Retry me", T0, False)

    assert scheduler.deliver_due(T0) == 0
    sink.fail = False
    assert scheduler.deliver_due(T0) == 1


def test_cancel_removes_reminder_and_overdue_variant() -> None:
    scheduler = ReminderScheduler(FakeSink())
    scheduler.schedule_reminder("t1", "a", T0, False)
    scheduler.schedule_reminder("overdue-t1", "a", T0, False)
    scheduler.schedule_reminder("t2", "b", T0, False)

    scheduler.cancel_reminder("t1")

    assert [r.identifier for r in scheduler.pending()] == ["t2"]


def test_overdue_alert_is_delivered_immediately() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink)

    scheduler.fire_overdue_alert("t1", "Passport")

    assert [n.identifier for n in sink.delivered] == ["overdue-t1"]
    assert scheduler.pending() == []


def test_overdue_alert_failure_raises_scheduling_error() -> None:
    scheduler = ReminderScheduler(FakeSink(fail=True))
    with pytest.raises(SchedulingError):
        scheduler.fire_overdue_alert("t1", "Passport")


def test_pending_limit() -> None:
    scheduler = ReminderScheduler(FakeSink(), max_pending=2)
    scheduler.schedule_reminder("t1", "a", T0, False)
    scheduler.schedule_reminder("t2", "b", T0, False)

    with pytest.raises(SchedulingError):
        scheduler.schedule_reminder("t3", "c", T0, False)

    # Replacing an existing identifier is still allowed.
    scheduler.schedule_reminder("t2", "b2", T0, False)


def test_non_datetime_fire_at_is_rejected() -> None:
    scheduler = ReminderScheduler(FakeSink())
    with pytest.raises(SchedulingError):
        scheduler.schedule_reminder("t1", "a", "2024-01-15", False)  # type: ignore[arg-type]


def test_missing_attachment_is_not_fatal(tmp_path: Path, caplog) -> None:
    scheduler = ReminderScheduler(FakeSink(), attachment_path=tmp_path / "appstore.png")

    with caplog.at_level(logging.WARNING):
        scheduler.schedule_reminder("t1", "a", T0, False)

    request = scheduler.get("t1")
    assert request is not None
    assert request.notification.attachment is None
    assert "attachment not found" in caplog.text


def test_existing_attachment_is_attached(tmp_path: Path) -> None:
    image = tmp_path / "appstore.png"
    image.write_bytes(b"\x89PNG")
    scheduler = ReminderScheduler(FakeSink(), attachment_path=image)

    scheduler.schedule_reminder("t1", "a", T0, False)

    assert scheduler.get("t1").notification.attachment == image


def test_log_sink_writes_notification(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="taskoff.notifications.sinks"):
        LogNotificationSink().deliver(build_overdue_alert("t1", "Passport"))
    assert "The task Passport is overdue." in caplog.text


@pytest.mark.asyncio
async def test_loop_delivers_due_reminders() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink, clock=lambda: T0)
    scheduler.schedule_reminder("t1", "ping", T0 - timedelta(minutes=1), False)

    runner = asyncio.create_task(run_reminder_scheduler(scheduler, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [n.identifier for n in sink.delivered] == ["t1"]


def test_pending_and_due_sort_mixed_naive_and_aware_triggers() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink)
    scheduler.schedule_reminder("aware", "a", datetime(2024, 1, 16, 9, 0, tzinfo=timezone.utc), False)
    scheduler.schedule_reminder("naive", "n", datetime(2024, 1, 15, 9, 0), False)

    assert [r.identifier for r in scheduler.pending()] == ["naive", "aware"]
    assert scheduler.deliver_due(datetime(2024, 1, 18, 9, 0)) == 2
    assert [n.identifier for n in sink.delivered] == ["naive", "aware"]


def test_completed_task_reminder_is_not_delivered() -> None:
    sink = FakeSink()
    scheduler = ReminderScheduler(sink)
    store = TaskStore(KeyValueTaskPersistence(FakeKeyValueStore()), scheduler, clock=lambda: T0)
    task = store.add("Walk dog", T0 + timedelta(hours=1))

    store.toggle(task.id)

    assert scheduler.get(task.id) is None
    assert scheduler.deliver_due(T0 + timedelta(hours=2)) == 0
    assert sink.delivered == []
