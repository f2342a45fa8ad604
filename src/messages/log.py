"""MessageLog — append-only message list persisted as a JSON file."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from src.config import settings

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class MessageEntry(BaseModel):
    """One logged message."""

    user: str
    text: str
    timestamp: str = ""


class MessageLog:
    """JSON-file backed message log.

    File I/O is synchronous — the file is small and local.  Appends hold an
    ``asyncio.Lock`` so concurrent requests in one process don't clobber each
    other's read-modify-write.  Separate processes sharing the file are not
    coordinated.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or settings.messages_file
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> list[dict]:
        """Return every logged entry, oldest first. A missing file is an empty log."""
        if not self._path.exists():
            return []
        raw = self._path.read_text("utf-8")
        if not raw.strip():
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            msg = f"Message log is not a JSON array: {self._path}"
            raise ValueError(msg)
        return data

    def _write(self, entries: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), "utf-8")

    async def append(self, user: str, text: str) -> dict:
        """Append a message and return the stored entry.

        Raises ``ValueError`` (without touching the file) if *user* or *text*
        is empty.
        """
        if not user or not text:
            msg = "user and text are required"
            raise ValueError(msg)

        entry = MessageEntry(
            user=user, text=text, timestamp=datetime.now(UTC).isoformat()
        ).model_dump()
        async with self._lock:
            entries = self.read()
            entries.append(entry)
            self._write(entries)
        logger.debug("Logged message from user=%s (%d total)", user, len(entries))
        return entry
