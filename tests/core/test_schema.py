"""Tests for schema creation, connection pragmas, and transaction helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from tessera.core import TesseraDB
from tessera.db_schema import CURRENT_SCHEMA_VERSION
from tessera.types.inputs import IssueCreate
from tests._db_factory import ALICE


class TestInitialize:
    def test_creates_tables_and_stamps_version(self, bare_db: TesseraDB) -> None:
        assert bare_db.get_schema_version() == 0
        bare_db.initialize()
        assert bare_db.get_schema_version() == CURRENT_SCHEMA_VERSION
        tables = {r[0] for r in bare_db.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert {"users", "sessions", "issues", "tags", "issue_tags"} <= tables

    def test_initialize_is_idempotent(self, seeded_db: TesseraDB) -> None:
        before = len(seeded_db.list_tags())
        seeded_db.initialize()
        assert len(seeded_db.list_tags()) == before

    def test_newer_schema_refused(self, bare_db: TesseraDB) -> None:
        bare_db.conn.execute(f"PRAGMA user_version = {CURRENT_SCHEMA_VERSION + 1}")
        with pytest.raises(RuntimeError, match="newer"):
            bare_db.initialize()

    def test_pragmas(self, seeded_db: TesseraDB) -> None:
        assert seeded_db.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert seeded_db.conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_context_manager_closes(self, tmp_path: Path) -> None:
        with TesseraDB(tmp_path / "ctx.db") as d:
            d.initialize()
            assert d._conn is not None
        assert d._conn is None


class TestTransactions:
    def test_atomic_rolls_back_on_error(self, seeded_db: TesseraDB) -> None:
        with pytest.raises(RuntimeError), seeded_db.atomic() as conn:
            conn.execute("DELETE FROM tags")
            raise RuntimeError("boom")
        assert len(seeded_db.list_tags()) > 0
        assert not seeded_db.conn.in_transaction

    def test_atomic_commits(self, seeded_db: TesseraDB) -> None:
        with seeded_db.atomic() as conn:
            conn.execute("DELETE FROM tags")
        assert seeded_db.list_tags() == []

    def test_nested_atomic_joins_outer(self, seeded_db: TesseraDB) -> None:
        with pytest.raises(RuntimeError), seeded_db.atomic():
            seeded_db.create_issue(IssueCreate(title="Inner"), actor_id=ALICE)
            raise RuntimeError("outer fails")
        assert seeded_db.count_issues() == 0

    def test_snapshot_leaves_no_open_transaction(self, seeded_db: TesseraDB) -> None:
        with seeded_db.snapshot() as conn:
            conn.execute("SELECT COUNT(*) FROM tags").fetchone()
            assert conn.in_transaction
        assert not seeded_db.conn.in_transaction

    def test_writes_visible_to_second_connection(self, seeded_db: TesseraDB) -> None:
        issue = seeded_db.create_issue(IssueCreate(title="Shared"), actor_id=ALICE)
        with TesseraDB(seeded_db.db_path) as other:
            assert other.get_issue(issue.id).title == "Shared"
