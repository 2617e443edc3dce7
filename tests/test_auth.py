"""Tests for user registration, session issuance, and actor resolution."""

from __future__ import annotations

import pytest

from tessera.auth import SESSION_COOKIE, Actor, SessionResolver, open_session, register_user
from tessera.core import TesseraDB
from tessera.errors import ConflictError, NotFoundError, ValidationError
from tessera.types.inputs import IssueCreate
from tests._db_factory import ALICE


class TestRegisterUser:
    def test_generated_id(self, db: TesseraDB) -> None:
        user = register_user(db, email=" carol@example.com ", name="Carol")
        assert len(user.id) == 32
        assert user.email == "carol@example.com"
        assert db.get_user(user.id) == user

    def test_duplicate_email(self, db: TesseraDB) -> None:
        with pytest.raises(ConflictError):
            register_user(db, email="alice@example.com", name="Other Alice")

    def test_blank_fields(self, db: TesseraDB) -> None:
        with pytest.raises(ValidationError):
            register_user(db, email="  ", name="Nobody")

    def test_listed_by_name(self, db: TesseraDB) -> None:
        register_user(db, email="aaron@example.com", name="Aaron")
        assert [u.name for u in db.list_users()] == ["Aaron", "Alice", "Bob"]


class TestSessions:
    def test_bearer_token_resolves(self, db: TesseraDB) -> None:
        token = open_session(db, ALICE)
        actor = SessionResolver(db).resolve({"authorization": f"Bearer {token}"}, {})
        assert actor == Actor(id=ALICE, name="Alice", email="alice@example.com")

    def test_cookie_resolves(self, db: TesseraDB) -> None:
        token = open_session(db, ALICE)
        assert SessionResolver(db).resolve({}, {SESSION_COOKIE: token}) is not None

    def test_custom_cookie_name(self, db: TesseraDB) -> None:
        token = open_session(db, ALICE)
        resolver = SessionResolver(db, cookie_name="sid")
        assert resolver.resolve({}, {SESSION_COOKIE: token}) is None
        assert resolver.resolve({}, {"sid": token}) is not None

    def test_no_credentials(self, db: TesseraDB) -> None:
        assert SessionResolver(db).resolve({}, {}) is None

    def test_unknown_user(self, db: TesseraDB) -> None:
        with pytest.raises(NotFoundError):
            open_session(db, "u-ghost")

    def test_non_positive_ttl(self, db: TesseraDB) -> None:
        with pytest.raises(ValidationError):
            open_session(db, ALICE, ttl_seconds=0)

    def test_ttl_beyond_storable_expiry(self, db: TesseraDB) -> None:
        with pytest.raises(ValidationError, match="too large"):
            open_session(db, ALICE, ttl_seconds=2**63)

    def test_sessions_removed_with_user(self, db: TesseraDB) -> None:
        token = open_session(db, ALICE)
        db.create_issue(IssueCreate(title="Owned"), actor_id=ALICE)
        with db.atomic() as conn:
            conn.execute("DELETE FROM users WHERE id = ?", (ALICE,))
        assert SessionResolver(db).resolve({"authorization": f"Bearer {token}"}, {}) is None
        # issues created by a removed user go with them
        assert db.count_issues() == 0
