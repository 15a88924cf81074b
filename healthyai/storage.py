"""Durable key-value storage port and its adapters.

The engine only ever needs ``get(key)`` / ``set(key, value)`` on strings.
``MemoryStorage`` backs tests; ``SQLiteStorage`` is the production adapter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiosqlite

from healthyai.config import settings

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

SESSIONS_KEY = "health_chats_storage"
KNOWLEDGE_KEY = "health_knowledge_base"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


@runtime_checkable
class StoragePort(Protocol):
    """Protocol every storage adapter must satisfy."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...


class MemoryStorage:
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


class SQLiteStorage:
    """Persists key-value pairs in a single SQLite table.

    Pass an explicit *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._db_path))
        if not self._initialised:
            await db.execute(_CREATE_TABLE)
            await db.commit()
            self._initialised = True
        return db

    async def get(self, key: str) -> str | None:
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return row[0] if row else None
        finally:
            await db.close()

    async def set(self, key: str, value: str) -> None:
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            await db.commit()
            logger.debug("Stored %s (%d bytes)", key, len(value))
        finally:
            await db.close()
