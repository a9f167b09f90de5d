# src/taskoff/storage/task_persistence.py

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from ..core.ports import KeyValueStore
from ..tasks.errors import PersistenceError
from ..tasks.task_models import Recurrence, Task

logger = logging.getLogger(__name__)

DEFAULT_TASKS_KEY = "tasks"

# Numeric dates are seconds since 2001-01-01T00:00:00Z (Apple reference date).
_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


def _encode_date(value: datetime) -> str:
    return value.isoformat()


def _decode_date(raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise ValueError(f"invalid dueDate: {raw!r}")
    if isinstance(raw, (int, float)):
        aware = _REFERENCE_DATE + timedelta(seconds=float(raw))
        return aware.astimezone().replace(tzinfo=None)
    if isinstance(raw, str):
        return datetime.fromisoformat(raw)
    raise ValueError(f"invalid dueDate: {raw!r}")


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "isCompleted": task.is_completed,
        "dueDate": _encode_date(task.due_date),
        "recurrence": task.recurrence.value,
    }


def record_to_task(record: dict[str, Any]) -> Task:
    """Build a Task from a stored record. Raises ValueError/KeyError/TypeError on bad input."""
    task_id = record["id"]
    if not isinstance(task_id, str) or not task_id:
        raise ValueError(f"invalid id: {task_id!r}")
    return Task(
        id=task_id,
        title=str(record.get("title") or ""),
        is_completed=bool(record.get("isCompleted", False)),
        due_date=_decode_date(record["dueDate"]),
        recurrence=Recurrence.parse(record.get("recurrence")),
    )


class KeyValueTaskPersistence:
    """
    Stores the whole task collection as one JSON array under a single key.

    load():
    - missing key -> empty list
    - undecodable document -> PersistenceError
    - malformed records are skipped (logged); duplicate ids keep the first record
    """

    def __init__(self, kv: KeyValueStore, *, key: str = DEFAULT_TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> list[Task]:
        raw = self._kv.get(self._key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Stored task collection under {self._key!r} is not valid JSON") from e

        if not isinstance(data, list):
            raise PersistenceError(f"Stored task collection under {self._key!r} is not a list")

        out: list[Task] = []
        seen: set[str] = set()
        for i, record in enumerate(data):
            if not isinstance(record, dict):
                logger.warning("Skipping non-object task record at index %d", i)
                continue
            try:
                task = record_to_task(record)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed task record at index %d", i, exc_info=True)
                continue
            if task.id in seen:
                logger.warning("Skipping duplicate task id=%s at index %d", task.id, i)
                continue
            seen.add(task.id)
            out.append(task)

        logger.debug("Loaded %d tasks from key=%s", len(out), self._key)
        return out

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            payload = json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError("Failed to JSON-encode task collection") from e
        self._kv.set(self._key, payload)
        logger.debug("Saved %d tasks to key=%s", len(tasks), self._key)
