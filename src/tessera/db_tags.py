"""TagsMixin — tag listing, creation, guarded deletion, and seeding."""

from __future__ import annotations

import logging
import sqlite3

from tessera.db_base import DBMixinProtocol, _now_epoch
from tessera.db_schema import DEFAULT_TAGS
from tessera.errors import ConflictError, NotFoundError, translate_integrity_error
from tessera.projection import tag_from_row
from tessera.types.core import Tag
from tessera.types.inputs import TagCreate

logger = logging.getLogger(__name__)


class TagsMixin(DBMixinProtocol):
    """Tag CRUD. Names are unique case-insensitively (``COLLATE NOCASE``)."""

    def list_tags(self) -> list[Tag]:
        rows = self.conn.execute("SELECT id, name, color, created_at FROM tags ORDER BY name ASC, id ASC").fetchall()
        return [tag_from_row(r) for r in rows]

    def get_tag(self, tag_id: int) -> Tag:
        row = self.conn.execute("SELECT id, name, color, created_at FROM tags WHERE id = ?", (tag_id,)).fetchone()
        if row is None:
            msg = f"Tag not found: {tag_id}"
            raise NotFoundError(msg)
        return tag_from_row(row)

    def create_tag(self, payload: TagCreate) -> Tag:
        # The NOCASE unique index is authoritative; the lookup only gives a
        # clearer message for the common case.
        existing = self.conn.execute("SELECT id FROM tags WHERE name = ? COLLATE NOCASE", (payload.name,)).fetchone()
        if existing is not None:
            msg = f"Tag with this name already exists: {payload.name}"
            raise ConflictError(msg)
        try:
            with self.atomic() as conn:
                cursor = conn.execute(
                    "INSERT INTO tags (name, color, created_at) VALUES (?, ?, ?)",
                    (payload.name, payload.color, _now_epoch()),
                )
                tag_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc) from exc
        if tag_id is None:  # pragma: no cover
            msg = "INSERT did not produce a lastrowid"
            raise RuntimeError(msg)
        return self.get_tag(tag_id)

    def delete_tag(self, tag_id: int) -> None:
        """Delete an unreferenced tag. Raises ConflictError while any issue carries it."""
        with self.atomic() as conn:
            if conn.execute("SELECT 1 FROM tags WHERE id = ?", (tag_id,)).fetchone() is None:
                msg = f"Tag not found: {tag_id}"
                raise NotFoundError(msg)
            in_use: int = conn.execute("SELECT COUNT(*) FROM issue_tags WHERE tag_id = ?", (tag_id,)).fetchone()[0]
            if in_use > 0:
                msg = f"Cannot delete tag that is assigned to {in_use} issue(s)"
                raise ConflictError(msg, details={"issue_count": in_use})
            conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        logger.info("Tag %d deleted", tag_id)

    def seed_default_tags(self) -> int:
        """Insert the default tag set, skipping names that already exist. Returns rows added."""
        now = _now_epoch()
        added = 0
        with self.atomic() as conn:
            for name, color in DEFAULT_TAGS:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO tags (name, color, created_at) VALUES (?, ?, ?)",
                    (name, color, now),
                )
                added += cursor.rowcount
        return added
