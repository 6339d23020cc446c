"""Tests for the migration runner's discovery and bookkeeping helpers."""

from unittest.mock import MagicMock

import psycopg2
import pytest

from run_migrations import (
    MIGRATIONS_DIR,
    Migration,
    apply_migration,
    checksum_of,
    discover_migrations,
    get_applied,
    pending_migrations,
)


@pytest.fixture
def migrations_dir(tmp_path):
    (tmp_path / "002_add_index.sql").write_text("CREATE INDEX x ON users (email);")
    (tmp_path / "001_create.sql").write_text("CREATE TABLE users (id uuid);")
    (tmp_path / "notes.txt").write_text("not a migration")
    return tmp_path


class TestDiscovery:
    def test_sorted_sql_files_only(self, migrations_dir):
        found = discover_migrations(migrations_dir)
        assert [m.name for m in found] == ["001_create.sql", "002_add_index.sql"]

    def test_missing_directory(self, tmp_path):
        assert discover_migrations(tmp_path / "nope") == []

    def test_bundled_users_migration(self):
        names = [m.name for m in discover_migrations(MIGRATIONS_DIR)]
        assert "001_create_users.sql" in names

    def test_checksum_tracks_content(self):
        assert checksum_of("a") == checksum_of("a")
        assert checksum_of("a") != checksum_of("b")
        assert len(checksum_of("a")) == 16


class TestPending:
    def test_all_pending_when_nothing_applied(self, migrations_dir):
        available = discover_migrations(migrations_dir)
        assert pending_migrations(available, {}) == available

    def test_applied_are_skipped(self, migrations_dir):
        first, second = discover_migrations(migrations_dir)
        assert pending_migrations([first, second], {first.name: first.checksum}) == [second]

    def test_changed_migration_is_not_rerun(self, migrations_dir):
        first, second = discover_migrations(migrations_dir)
        applied = {first.name: "stale", second.name: second.checksum}
        assert pending_migrations([first, second], applied) == []


class TestDatabaseHelpers:
    def _conn(self):
        conn = MagicMock()
        cursor = conn.cursor.return_value.__enter__.return_value
        return conn, cursor

    def test_get_applied(self):
        conn, cursor = self._conn()
        cursor.fetchall.return_value = [("001_create.sql", "abc")]
        assert get_applied(conn) == {"001_create.sql": "abc"}

    def test_apply_commits(self, migrations_dir):
        conn, cursor = self._conn()
        migration = discover_migrations(migrations_dir)[0]

        apply_migration(conn, migration)

        assert cursor.execute.call_count == 2
        cursor.execute.assert_any_call("CREATE TABLE users (id uuid);")
        conn.commit.assert_called_once()

    def test_apply_rolls_back_on_failure(self, tmp_path):
        path = tmp_path / "001_bad.sql"
        path.write_text("NOT SQL")
        conn, cursor = self._conn()
        cursor.execute.side_effect = psycopg2.ProgrammingError("syntax error")

        with pytest.raises(psycopg2.ProgrammingError):
            apply_migration(conn, Migration(path.name, path, checksum_of("NOT SQL")))

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
