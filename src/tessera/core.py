"""Core database handle for the issue tracker.

Single source of truth for all SQLite operations. The HTTP app and the CLI
both construct a ``TesseraDB`` explicitly and pass it where it is needed;
there is no module-level connection.

Covers issues, tag associations, tags, and read access to users.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from tessera.db_issues import IssuesMixin
from tessera.db_schema import CURRENT_SCHEMA_VERSION, SCHEMA_SQL
from tessera.db_tags import TagsMixin
from tessera.db_users import UsersMixin
from tessera.types.core import Issue, Tag, UserRef

logger = logging.getLogger(__name__)

__all__ = ["Issue", "Tag", "TesseraDB", "UserRef"]


class TesseraDB(IssuesMixin, TagsMixin, UsersMixin):
    """Direct SQLite operations over one long-lived connection.

    Writes go through ``atomic()``; multi-query reads go through
    ``snapshot()``. Both join an already-open transaction instead of
    nesting, so a mutation can re-read its own rows before committing.
    """

    def __init__(self, db_path: str | Path, *, check_same_thread: bool = True) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._check_same_thread = check_same_thread

    @classmethod
    def from_project(cls, project_path: Path | None = None, *, check_same_thread: bool = True) -> TesseraDB:
        """Open the database of the ``.tessera/`` project found from *project_path* (or cwd)."""
        from tessera.config import resolve_db_path

        db = cls(resolve_db_path(project_path), check_same_thread=check_same_thread)
        db.initialize()
        return db

    def __enter__(self) -> TesseraDB:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                isolation_level="DEFERRED",
                check_same_thread=self._check_same_thread,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.execute("PRAGMA busy_timeout=5000")
        return self._conn

    def initialize(self) -> None:
        """Create tables on a fresh database and stamp the schema version."""
        current_version = self.get_schema_version()
        if current_version == 0:
            self.conn.executescript(SCHEMA_SQL)
            self.conn.execute(f"PRAGMA user_version = {CURRENT_SCHEMA_VERSION}")
        elif current_version > CURRENT_SCHEMA_VERSION:
            msg = f"Database schema v{current_version} is newer than this tessera (v{CURRENT_SCHEMA_VERSION})"
            raise RuntimeError(msg)
        self.conn.commit()

    def get_schema_version(self) -> int:
        result: int = self.conn.execute("PRAGMA user_version").fetchone()[0]
        return result

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -- Transactions ----------------------------------------------------------

    @contextlib.contextmanager
    def atomic(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one write transaction.

        Commits on success and rolls back on any exception. Inside an
        already-open transaction it simply yields, leaving commit/rollback
        to the outer owner.
        """
        conn = self.conn
        if conn.in_transaction:
            yield conn
            return
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    @contextlib.contextmanager
    def snapshot(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed reads against one consistent view of the database."""
        conn = self.conn
        if conn.in_transaction:
            yield conn
            return
        conn.execute("BEGIN")
        try:
            yield conn
        finally:
            conn.rollback()
