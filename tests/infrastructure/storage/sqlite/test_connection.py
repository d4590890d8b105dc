"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

import src.infrastructure.storage.sqlite.connection as conn_module
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

INSERT_DOC = "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)"


class TestConnectionPoolInit:
    """Tests for ConnectionPool construction."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)

        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool.initialized is False

    def test_custom_sizes(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=10, busy_timeout=500)

        assert pool.pool_size == 10
        assert pool.busy_timeout == 500


class TestConnectionPoolInitialize:
    """Tests for ConnectionPool.initialize()."""

    async def test_initialize_creates_directory(self, tmp_path: Path):
        """Initialize creates database directory if not exists."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        """Multiple initialize calls open the connections once."""
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert len(pool._connections) == 2
        assert pool._pool.qsize() == 2
        await pool.close()

    async def test_connection_pragmas(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, busy_timeout=1234)
        conn = await pool._create_connection()

        cursor = await conn.execute("PRAGMA journal_mode")
        assert (await cursor.fetchone())[0].lower() == "wal"
        cursor = await conn.execute("PRAGMA busy_timeout")
        assert (await cursor.fetchone())[0] == 1234
        assert conn.row_factory == aiosqlite.Row
        await conn.close()


class TestConnectionPoolAcquire:
    """Tests for ConnectionPool.acquire()."""

    async def test_acquire_auto_initializes(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)

        async with pool.acquire() as conn:
            assert pool.initialized is True
            assert isinstance(conn, aiosqlite.Connection)

        await pool.close()

    async def test_acquire_returns_on_exception(self, temp_db_path: Path):
        """Connection is returned even if exception occurs."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        with pytest.raises(ValueError):
            async with pool.acquire() as _conn:
                assert pool._pool.qsize() == 0
                raise ValueError("Test error")

        assert pool._pool.qsize() == 1
        await pool.close()

    async def test_acquire_blocks_when_pool_exhausted(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire() as _conn1:
            with pytest.raises(asyncio.TimeoutError):
                async with asyncio.timeout(0.1):
                    async with pool.acquire() as _conn2:
                        pass

        await pool.close()


class TestConnectionPoolTransaction:
    """Tests for ConnectionPool.transaction()."""

    async def test_commits_on_success(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        async with pool.transaction() as conn:
            await conn.execute(INSERT_DOC, ("boms", "b-1", "{}"))

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT id FROM documents WHERE collection = 'boms'")
            row = await cursor.fetchone()
            assert row["id"] == "b-1"

        await pool.close()

    async def test_rolls_back_on_exception(self, initialized_db: Path):
        pool = ConnectionPool(initialized_db, pool_size=1)

        with pytest.raises(ValueError):
            async with pool.transaction(immediate=True) as conn:
                await conn.execute(INSERT_DOC, ("boms", "b-2", "{}"))
                raise ValueError("Force rollback")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM documents")
            assert (await cursor.fetchone())[0] == 0

        await pool.close()


class TestConnectionPoolClose:
    async def test_close_resets_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()

        await pool.close()

        assert pool._connections == []
        assert pool.initialized is False

    async def test_close_safe_when_not_initialized(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.close()


class TestGlobalPool:
    """Tests for the module-level pool helpers."""

    @pytest.fixture(autouse=True)
    async def _no_global_pool(self):
        previous = conn_module._pool
        conn_module._pool = None
        yield
        await close_pool()
        conn_module._pool = previous

    async def test_get_pool_uses_settings(self, mock_settings):
        pool = await get_pool()

        assert pool.db_path == mock_settings.storage.db_path
        assert pool.pool_size == 1
        assert await get_pool() is pool

    async def test_close_pool_clears_global(self, mock_settings):
        await get_pool()

        await close_pool()

        assert conn_module._pool is None

    async def test_close_pool_safe_when_none(self):
        await close_pool()

    async def test_get_connection_and_transaction(self, mock_settings):
        async with get_transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")
            await conn.execute("INSERT INTO t VALUES (7)")

        async with get_connection() as conn:
            cursor = await conn.execute("SELECT x FROM t")
            assert (await cursor.fetchone())[0] == 7
