# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from taskoff.storage.task_persistence import KeyValueTaskPersistence
from taskoff.tasks.task_store import TaskStore

from .fakes import FakeKeyValueStore, FakeNotifier

NOW = datetime(2024, 1, 15, 12, 0)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def kv() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def make_store(kv: FakeKeyValueStore, notifier: FakeNotifier, now: datetime) -> Callable[[], TaskStore]:
    """
    Factory for a TaskStore wired with deterministic fakes.

    Calling it again builds a fresh store over the same key-value data,
    which is how "app restart" scenarios are simulated.
    """

    def _make() -> TaskStore:
        return TaskStore(KeyValueTaskPersistence(kv), notifier, clock=lambda: now)

    return _make


@pytest.fixture()
def store(make_store: Callable[[], TaskStore]) -> TaskStore:
    return make_store()
