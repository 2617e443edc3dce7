"""Shared pytest fixtures for tessera tests."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner

from tessera.core import TesseraDB
from tessera.types.inputs import IssueCreate, TagCreate
from tests._db_factory import ALICE, BOB, make_db


@dataclass
class PopulatedDB:
    """A TesseraDB plus the ids of the records seeded into it."""

    db: TesseraDB
    ids: dict[str, int] = field(default_factory=dict)


@pytest.fixture
def db(tmp_path: Path) -> Generator[TesseraDB, None, None]:
    """Fresh TesseraDB with two users (alice, bob) and no tags."""
    d = make_db(tmp_path)
    yield d
    d.close()


def populate(db: TesseraDB) -> PopulatedDB:
    """Seed *db* with a representative issue set.

    Creates:
    - tags: bug (#ef4444), ui (#3b82f6), docs (#6b7280)
    - login: in_progress/high, assigned to bob, tags bug+ui
    - readme: not_started/low, unassigned, tag docs, created by bob
    - crash: done/high, assigned to alice, tag bug
    """
    bug = db.create_tag(TagCreate(name="bug", color="#ef4444"))
    ui = db.create_tag(TagCreate(name="ui", color="#3b82f6"))
    docs = db.create_tag(TagCreate(name="docs", color="#6b7280"))
    login = db.create_issue(
        IssueCreate(
            title="Login button does nothing",
            description="Clicking login on Safari is a no-op",
            status="in_progress",
            priority="high",
            assigned_user_id=BOB,
            tag_ids=(bug.id, ui.id),
        ),
        actor_id=ALICE,
    )
    readme = db.create_issue(
        IssueCreate(title="Update README", priority="low", tag_ids=(docs.id,)),
        actor_id=BOB,
    )
    crash = db.create_issue(
        IssueCreate(
            title="Crash on save",
            status="done",
            priority="high",
            assigned_user_id=ALICE,
            tag_ids=(bug.id,),
        ),
        actor_id=ALICE,
    )
    ids = {
        "bug": bug.id,
        "ui": ui.id,
        "docs": docs.id,
        "login": login.id,
        "readme": readme.id,
        "crash": crash.id,
    }
    return PopulatedDB(db=db, ids=ids)


@pytest.fixture
def populated_db(db: TesseraDB) -> PopulatedDB:
    """TesseraDB pre-populated via populate()."""
    return populate(db)


@pytest.fixture
def tessera_project(tmp_path: Path) -> Path:
    """A tmp directory set up as a tessera project (.tessera/ with config + db).

    Returns the project root (parent of .tessera/).
    """
    make_db(tmp_path, project=True, seed_tags=True).close()
    return tmp_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()
