"""Shared utilities, types, and Protocol for DB mixins."""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tessera.types.core import Issue


# SQLite INTEGER is a signed 64-bit value; binding anything wider raises OverflowError.
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def fits_sqlite_int(value: int) -> bool:
    return SQLITE_INT_MIN <= value <= SQLITE_INT_MAX


def _now_epoch() -> int:
    return int(time.time())


def _epoch_to_iso(value: int) -> str:
    return datetime.fromtimestamp(value, UTC).isoformat()


class DBMixinProtocol(Protocol):
    """Shared attributes and methods that DB mixins access via self.

    Mixins inherit this Protocol so mypy can type-check self.conn,
    self.get_issue(), etc. without ``type: ignore`` on every call.
    Actual implementations are provided by TesseraDB at composition time.
    """

    db_path: Path
    _conn: sqlite3.Connection | None

    @property
    def conn(self) -> sqlite3.Connection: ...

    def atomic(self) -> AbstractContextManager[sqlite3.Connection]: ...

    def snapshot(self) -> AbstractContextManager[sqlite3.Connection]: ...

    def get_issue(self, issue_id: int) -> Issue: ...

    def _project(self, rows: list[sqlite3.Row]) -> Iterator[Issue]: ...
