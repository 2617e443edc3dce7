"""UsersMixin — read-only access to users owned by the auth subsystem."""

from __future__ import annotations

from tessera.db_base import DBMixinProtocol
from tessera.errors import NotFoundError
from tessera.types.core import UserRef


class UsersMixin(DBMixinProtocol):
    def list_users(self) -> list[UserRef]:
        rows = self.conn.execute("SELECT id, name, email FROM users ORDER BY name ASC, id ASC").fetchall()
        return [UserRef(id=r["id"], name=r["name"], email=r["email"]) for r in rows]

    def get_user(self, user_id: str) -> UserRef:
        row = self.conn.execute("SELECT id, name, email FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            msg = f"User not found: {user_id}"
            raise NotFoundError(msg)
        return UserRef(id=row["id"], name=row["name"], email=row["email"])
