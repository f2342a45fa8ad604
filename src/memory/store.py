"""MemoryStore — per-user memory CRUD via libsql."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.config import settings
from src.db import get_connection
from src.memory.models import MemoryRecord

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id         TEXT PRIMARY KEY,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS memories (
        id         TEXT PRIMARY KEY,
        user_id    TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        key        TEXT,
        value      TEXT NOT NULL,
        tags       TEXT NOT NULL DEFAULT '[]',
        importance INTEGER NOT NULL DEFAULT 1,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_mem_user ON memories(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_mem_updated ON memories(updated_at DESC)",
)


def _row_to_record(row: tuple) -> MemoryRecord:
    return MemoryRecord(
        id=row[0],
        key=row[1],
        value=row[2],
        tags=json.loads(row[3]) if row[3] else [],
        importance=row[4],
        updated_at=row[5],
    )


class MemoryStore:
    """Persists user memories in SQLite / libSQL.

    Singleton accessed via ``MemoryStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: MemoryStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path
        self._initialised = False

    @classmethod
    def get(cls) -> MemoryStore:
        """Return the shared MemoryStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self):  # noqa: ANN201
        db = await get_connection(local_path_override=self._db_path)
        if not self._initialised:
            for statement in _SCHEMA:
                await db.execute(statement)
            await db.commit()
            self._initialised = True
        return db

    async def initialise(self) -> None:
        """Create tables and indexes if they don't exist yet."""
        db = await self._connect()
        await db.close()
        logger.info("DB ready ✅")

    async def ping(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT 1")
            await cursor.fetchone()
        finally:
            await db.close()

    # -- Writes ----------------------------------------------------------------

    async def ensure_user(self, user_id: str) -> None:
        """Create the user row on first write."""
        db = await self._connect()
        try:
            await self._ensure_user(db, user_id)
            await db.commit()
        finally:
            await db.close()

    @staticmethod
    async def _ensure_user(db, user_id: str) -> None:  # noqa: ANN001
        await db.execute(
            "INSERT INTO users (id, created_at) VALUES (?, ?) ON CONFLICT DO NOTHING",
            (user_id, datetime.now(UTC).isoformat()),
        )

    async def add(
        self,
        user_id: str,
        value: str,
        key: str | None = None,
        tags: list[str] | None = None,
        importance: int = 1,
    ) -> str:
        """Insert a memory for *user_id* and return its new ID."""
        memory_id = str(uuid.uuid4())
        now = datetime.now(UTC).isoformat()
        db = await self._connect()
        try:
            await self._ensure_user(db, user_id)
            await db.execute(
                """
                INSERT INTO memories (id, user_id, key, value, tags, importance, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    memory_id,
                    user_id,
                    key or None,
                    value,
                    json.dumps(tags or [], ensure_ascii=False),
                    importance,
                    now,
                ),
            )
            await db.commit()
        finally:
            await db.close()
        logger.debug("Stored memory %s for user=%s", memory_id, user_id)
        return memory_id

    async def delete(self, user_id: str, memory_id: str) -> bool:
        """Delete one memory owned by *user_id*. Returns True if a row was removed."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "DELETE FROM memories WHERE id = ? AND user_id = ?",
                (memory_id, user_id),
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    async def clear(self, user_id: str) -> int:
        """Delete every memory owned by *user_id*. Returns the number removed."""
        db = await self._connect()
        try:
            cursor = await db.execute("DELETE FROM memories WHERE user_id = ?", (user_id,))
            await db.commit()
            removed = cursor.rowcount
        finally:
            await db.close()
        logger.info("Cleared %d memories for user=%s", removed, user_id)
        return removed

    # -- Reads -----------------------------------------------------------------

    async def list(self, user_id: str, limit: int | None = None) -> list[MemoryRecord]:
        """Most recently updated memories first, bounded by *limit*."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                SELECT id, key, value, tags, importance, updated_at
                FROM memories
                WHERE user_id = ?
                ORDER BY updated_at DESC, rowid DESC
                LIMIT ?
                """,
                (user_id, limit or settings.memory_list_limit),
            )
            rows = await cursor.fetchall()
            return [_row_to_record(row) for row in rows]
        finally:
            await db.close()

    async def count(self, user_id: str) -> int:
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM memories WHERE user_id = ?", (user_id,)
            )
            row = await cursor.fetchone()
            return row[0] if row else 0
        finally:
            await db.close()
