"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite.migrations import migrator
from src.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    discover_migrations,
    get_migration_status,
    initialize_database,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert info.path == migration_file
        assert len(info.checksum) == 16  # First 16 chars of SHA-256

    def test_checksum_follows_content(self, tmp_path: Path):
        first = tmp_path / "v001_a.sql"
        first.write_text("SELECT 1;")
        second = tmp_path / "v002_b.sql"
        second.write_text("SELECT 2;")

        assert MigrationInfo.from_file(first).checksum != MigrationInfo.from_file(second).checksum

    @pytest.mark.parametrize("filename", ["invalid_migration.sql", "v_no_number.sql"])
    def test_invalid_filename_raises(self, tmp_path: Path, filename: str):
        path = tmp_path / filename
        path.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(path)


def test_discover_bundled_migrations():
    versions = [m.version for m in discover_migrations()]

    assert versions[0] == "001"
    assert versions == sorted(versions)


class TestInitializeDatabase:
    async def test_creates_documents_table(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path)

        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'documents'"
            )
            assert await cursor.fetchone() is not None

    async def test_second_run_applies_nothing(self, temp_db_path: Path):
        await initialize_database(temp_db_path)

        assert await initialize_database(temp_db_path) == []

    async def test_failure_stops_run(
        self, temp_db_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_ok.sql").write_text("CREATE TABLE a (x INTEGER);")
        (migrations_dir / "v002_broken.sql").write_text("CREATE TABLE (;")
        (migrations_dir / "v003_never.sql").write_text("CREATE TABLE c (x INTEGER);")
        monkeypatch.setattr(migrator, "MIGRATIONS_DIR", migrations_dir)

        results = await initialize_database(temp_db_path)

        assert [(r.version, r.success) for r in results] == [("001", True), ("002", False)]
        assert results[1].error


class TestMigrationStatus:
    async def test_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")

        assert status["exists"] is False
        assert status["current_version"] is None
        assert "001" in status["pending"]

    async def test_migrated_database(self, temp_db_path: Path):
        await initialize_database(temp_db_path)

        status = await get_migration_status(temp_db_path)

        assert status["exists"] is True
        assert status["current_version"] == "001"
        assert status["pending"] == []
