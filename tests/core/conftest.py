"""Fixtures for core DB tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from tessera.core import TesseraDB
from tests._db_factory import make_db


@pytest.fixture
def seeded_db(tmp_path: Path) -> Generator[TesseraDB, None, None]:
    """TesseraDB with users and the default tag set."""
    d = make_db(tmp_path, seed_tags=True)
    yield d
    d.close()


@pytest.fixture
def bare_db(tmp_path: Path) -> Generator[TesseraDB, None, None]:
    """Uninitialized TesseraDB handle (no tables yet)."""
    d = TesseraDB(tmp_path / "bare.db")
    yield d
    d.close()
