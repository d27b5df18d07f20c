"""SQLite storage adapter.

Implements the core KeyValueStore port using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class SQLiteKeyValueStore:
    """Thin SQLite wrapper that satisfies the KeyValueStore contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the kv table if it does not exist.

        Fields:
        - key: namespaced key such as ``user_topic:<id>`` (PRIMARY KEY)
        - value: string payload (plain values or JSON documents)
        - updated_at: last write time, for debugging only
        """

        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return str(row["value"]) if row else None

    def put(self, key: str, value: str) -> None:
        """Upsert a single key; there are no multi-key transactions."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now.isoformat()),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def count_keys(self, prefix: str = "") -> int:
        """Return how many keys start with ``prefix``."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            ).fetchone()
        return int(row["total"])
