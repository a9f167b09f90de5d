# src/taskoff/storage/kv_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from ..tasks.errors import PersistenceError

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """
    SQLite-backed key-value store.

    One table, one row per key. Values are opaque strings (the task
    collection is stored as a JSON document under a single key).

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "taskoff.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("KeyValueStore ready db=%s", self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open key-value store {self._db_path}") from e
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot create key-value schema in {self._db_path}") from e
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read key {key!r}") from e
        return None if row is None else str(row["value"])

    def set(self, key: str, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write key {key!r}") from e
        logger.debug("KeyValueStore set key=%s bytes=%d", key, len(value))

