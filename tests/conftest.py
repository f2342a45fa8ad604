"""Shared test fixtures."""

import pytest

from src.memory.store import MemoryStore


@pytest.fixture(autouse=False)
def _no_remote_db(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use a local file, not a remote database."""
    monkeypatch.setattr("src.config.settings.database_url", "")


@pytest.fixture
def memory_store(tmp_path, _no_remote_db) -> MemoryStore:
    """A MemoryStore backed by a temp database."""
    MemoryStore._reset()
    yield MemoryStore(db_path=tmp_path / "test.db")
    MemoryStore._reset()
