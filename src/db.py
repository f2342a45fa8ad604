"""Async database connection abstraction over libsql.

Provides a thin async wrapper around the synchronous ``libsql`` driver using
``asyncio.to_thread()``.  Connection target is determined by settings:

- **Remote**: ``DATABASE_URL`` with a ``libsql://``, ``https://`` or ``wss://``
  scheme (plus ``DATABASE_AUTH_TOKEN``) → hosted libSQL / sqld
- **Local**: ``DATABASE_URL`` as a ``file:`` URL or plain path, or no
  ``DATABASE_URL`` at all → local SQLite file via ``database_path``
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import libsql

from src.config import settings

_SECURE_SCHEMES = ("libsql://", "https://", "wss://")
_INSECURE_SCHEMES = ("http://", "ws://")


class _AsyncCursor:
    """Thin async wrapper around a synchronous libsql cursor."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    async def fetchone(self) -> tuple | None:
        return await asyncio.to_thread(self._cursor.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await asyncio.to_thread(self._cursor.fetchall)

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class _AsyncConnection:
    """Thin async wrapper around a synchronous libsql connection."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    async def execute(self, sql: str, params: tuple = ()) -> _AsyncCursor:
        cursor = await asyncio.to_thread(self._conn.execute, sql, params)
        return _AsyncCursor(cursor)

    async def commit(self) -> None:
        await asyncio.to_thread(self._conn.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)


def _open_local(path: str) -> Any:
    """Open a local libsql connection with WAL mode, busy timeout and FK enforcement."""
    conn = libsql.connect(path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def resolve_target(url: str, *, production: bool = False) -> tuple[str, str]:
    """Classify a DATABASE_URL value.

    Returns ``("remote", url)`` or ``("local", path)``.  An empty *url* maps
    to the configured ``database_path``.  Plain-text remote schemes are
    refused in production.
    """
    url = url.strip()
    if not url:
        return "local", str(settings.database_path)
    if url.startswith(_SECURE_SCHEMES):
        return "remote", url
    if url.startswith(_INSECURE_SCHEMES):
        if production:
            msg = f"Refusing unencrypted DATABASE_URL in production: {url.split('://')[0]}://"
            raise ValueError(msg)
        return "remote", url
    if url.startswith("file:"):
        return "local", url.removeprefix("file:").removeprefix("//")
    if "://" in url:
        msg = f"Unsupported DATABASE_URL scheme: {url.split('://')[0]}"
        raise ValueError(msg)
    return "local", url


async def get_connection(local_path_override: Path | None = None) -> _AsyncConnection:
    """Return an async-wrapped libsql connection.

    If *local_path_override* is given (test isolation), it takes priority.
    Otherwise ``DATABASE_URL`` decides between a remote connection and a
    local file.
    """
    if local_path_override:
        local_path_override.parent.mkdir(parents=True, exist_ok=True)
        conn = await asyncio.to_thread(_open_local, str(local_path_override))
        return _AsyncConnection(conn)

    kind, target = resolve_target(settings.database_url, production=settings.is_production)
    if kind == "remote":
        conn = await asyncio.to_thread(
            libsql.connect,
            database=target,
            auth_token=settings.database_auth_token,
        )
        return _AsyncConnection(conn)

    Path(target).parent.mkdir(parents=True, exist_ok=True)
    conn = await asyncio.to_thread(_open_local, target)
    return _AsyncConnection(conn)
