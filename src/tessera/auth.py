"""Actor resolution for mutating requests.

The core only needs to know *who* is acting. ``ActorResolver`` is the seam;
``SessionResolver`` is the default implementation, backed by the
``sessions`` table. ``register_user`` and ``open_session`` are the admin
surface used by the CLI and tests.
"""

from __future__ import annotations

import logging
import secrets
import sqlite3
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tessera.db_base import _now_epoch, fits_sqlite_int
from tessera.errors import ValidationError, translate_integrity_error
from tessera.types.core import UserRef

if TYPE_CHECKING:
    from tessera.core import TesseraDB

logger = logging.getLogger(__name__)

SESSION_COOKIE = "tessera_session"
DEFAULT_SESSION_TTL = 30 * 24 * 60 * 60  # 30 days


@dataclass(frozen=True)
class Actor:
    id: str
    name: str
    email: str


class ActorResolver(Protocol):
    def resolve(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> Actor | None: ...


def _bearer_token(headers: Mapping[str, str]) -> str | None:
    raw = headers.get("authorization") or headers.get("Authorization")
    if not raw:
        return None
    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SessionResolver:
    """Resolve the actor from a bearer token or the session cookie.

    Either credential is a session id; expired sessions resolve to ``None``.
    """

    def __init__(self, db: TesseraDB, *, cookie_name: str = SESSION_COOKIE) -> None:
        self.db = db
        self.cookie_name = cookie_name

    def resolve(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> Actor | None:
        token = _bearer_token(headers) or cookies.get(self.cookie_name)
        if not token:
            return None
        row = self.db.conn.execute(
            "SELECT u.id, u.name, u.email FROM sessions s JOIN users u ON u.id = s.user_id "
            "WHERE s.id = ? AND s.expires_at > ?",
            (token, _now_epoch()),
        ).fetchone()
        if row is None:
            return None
        return Actor(id=row["id"], name=row["name"], email=row["email"])


def register_user(db: TesseraDB, *, email: str, name: str, user_id: str | None = None) -> UserRef:
    email = email.strip()
    name = name.strip()
    if not email or not name:
        raise ValidationError("email and name are required")
    user_id = user_id or uuid.uuid4().hex
    try:
        with db.atomic() as conn:
            conn.execute(
                "INSERT INTO users (id, email, name, created_at) VALUES (?, ?, ?, ?)",
                (user_id, email, name, _now_epoch()),
            )
    except sqlite3.IntegrityError as exc:
        raise translate_integrity_error(exc) from exc
    logger.info("User %s registered", user_id)
    return UserRef(id=user_id, name=name, email=email)


def open_session(db: TesseraDB, user_id: str, *, ttl_seconds: int = DEFAULT_SESSION_TTL) -> str:
    """Create a session for *user_id* and return its token."""
    if ttl_seconds <= 0:
        raise ValidationError("ttl_seconds must be positive")
    now = _now_epoch()
    if not fits_sqlite_int(now + ttl_seconds):
        raise ValidationError("ttl_seconds is too large")
    db.get_user(user_id)
    token = secrets.token_urlsafe(32)
    with db.atomic() as conn:
        conn.execute(
            "INSERT INTO sessions (id, user_id, expires_at, created_at) VALUES (?, ?, ?, ?)",
            (token, user_id, now + ttl_seconds, now),
        )
    return token
