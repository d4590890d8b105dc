"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

import src.infrastructure.storage.sqlite.connection as conn_module
from src.config import get_settings
from src.infrastructure.storage.sqlite import ConnectionPool, SQLiteDocumentStore
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    await initialize_database(temp_db_path)
    return temp_db_path


@pytest.fixture
async def pool(initialized_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Global connection pool pointed at the temporary database."""
    previous = conn_module._pool
    test_pool = ConnectionPool(initialized_db, pool_size=2)
    await test_pool.initialize()
    conn_module._pool = test_pool
    yield test_pool
    await test_pool.close()
    conn_module._pool = previous


@pytest.fixture
def sqlite_store(pool: ConnectionPool) -> SQLiteDocumentStore:
    """Document store over the temporary database."""
    return SQLiteDocumentStore()


@pytest.fixture
def mock_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Settings with storage redirected to a temporary directory."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("STORAGE_POOL_SIZE", "1")
    from src.config import reset_settings

    reset_settings()
    return get_settings()
