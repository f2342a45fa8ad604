"""Tests for async database connection abstraction."""

from pathlib import Path

import pytest

from src.db import _AsyncConnection, get_connection, resolve_target

pytestmark = pytest.mark.usefixtures("_no_remote_db")


class TestGetConnection:
    async def test_returns_async_connection(self, tmp_path: Path):
        conn = await get_connection(local_path_override=tmp_path / "test.db")
        assert isinstance(conn, _AsyncConnection)
        await conn.close()

    async def test_creates_parent_dirs(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "dir" / "test.db"
        conn = await get_connection(local_path_override=db_path)
        assert db_path.parent.exists()
        await conn.close()

    async def test_uses_local_database_url(self, tmp_path: Path, monkeypatch):
        db_path = tmp_path / "from_url" / "test.db"
        monkeypatch.setattr("src.config.settings.database_url", f"file:{db_path}")
        conn = await get_connection()
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
        await conn.commit()
        await conn.close()
        assert db_path.exists()


class TestResolveTarget:
    def test_empty_falls_back_to_database_path(self, monkeypatch):
        monkeypatch.setattr("src.config.settings.database_path", Path("x/y.db"))
        assert resolve_target("") == ("local", str(Path("x/y.db")))

    def test_remote_schemes(self):
        assert resolve_target("libsql://db.example.io") == ("remote", "libsql://db.example.io")
        assert resolve_target("https://db.example.io") == ("remote", "https://db.example.io")

    def test_plain_path(self):
        assert resolve_target("data/app.db") == ("local", "data/app.db")

    def test_file_url(self):
        assert resolve_target("file:data/app.db") == ("local", "data/app.db")

    def test_insecure_remote_allowed_in_development(self):
        assert resolve_target("http://127.0.0.1:8080") == ("remote", "http://127.0.0.1:8080")

    def test_insecure_remote_refused_in_production(self):
        with pytest.raises(ValueError, match="unencrypted"):
            resolve_target("http://127.0.0.1:8080", production=True)

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="Unsupported DATABASE_URL scheme: postgres"):
            resolve_target("postgres://user@host/db")


class TestAsyncConnection:
    async def test_execute_and_fetchall(self, tmp_path: Path):
        conn = await get_connection(local_path_override=tmp_path / "test.db")
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
        await conn.execute("INSERT INTO t (name) VALUES (?)", ("alice",))
        await conn.commit()

        cursor = await conn.execute("SELECT name FROM t")
        rows = await cursor.fetchall()
        assert rows == [("alice",)]
        await conn.close()

    async def test_fetchone_returns_none_when_empty(self, tmp_path: Path):
        conn = await get_connection(local_path_override=tmp_path / "test.db")
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")

        cursor = await conn.execute("SELECT * FROM t WHERE id = 999")
        row = await cursor.fetchone()
        assert row is None
        await conn.close()

    async def test_rowcount(self, tmp_path: Path):
        conn = await get_connection(local_path_override=tmp_path / "test.db")
        await conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
        await conn.execute("INSERT INTO t (name) VALUES (?)", ("a",))
        await conn.execute("INSERT INTO t (name) VALUES (?)", ("b",))
        await conn.commit()

        cursor = await conn.execute("DELETE FROM t")
        assert cursor.rowcount == 2
        await conn.close()
