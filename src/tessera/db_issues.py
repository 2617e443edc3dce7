"""IssuesMixin — issue CRUD, tag-set replacement, and paginated listing.

All methods access ``self.conn``, ``self.atomic()``, etc. via Python's MRO
when composed into ``TesseraDB``.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence

from tessera.db_base import DBMixinProtocol, _now_epoch
from tessera.errors import NotFoundError, translate_integrity_error
from tessera.projection import group_tags, project_issues
from tessera.query import (
    IssueFilter,
    IssuePage,
    PageRequest,
    Pagination,
    build_count_query,
    build_issue_lookup,
    build_page_query,
    build_tag_lookup,
)
from tessera.types.core import Issue, Tag
from tessera.types.inputs import IssueCreate, IssuePatch, Present

logger = logging.getLogger(__name__)


class IssuesMixin(DBMixinProtocol):
    """Issue CRUD and listing.

    Inherits ``DBMixinProtocol`` for type-safe access to shared attributes.
    Actual implementations provided by ``TesseraDB`` at composition time via MRO.
    """

    # -- Projection ------------------------------------------------------------

    def _project(self, rows: list[sqlite3.Row]) -> Iterator[Issue]:
        """Fetch tags for *rows* now; build Issue objects lazily.

        The tag lookup runs immediately so callers inside ``snapshot()`` see
        tags from the same read transaction as the rows.
        """
        tags_by_issue: dict[int, list[Tag]] = {}
        if rows:
            q = build_tag_lookup([r["id"] for r in rows])
            tags_by_issue = group_tags(self.conn.execute(q.sql, q.params).fetchall())
        return project_issues(rows, tags_by_issue)

    def _require_issue(self, issue_id: int) -> None:
        if self.conn.execute("SELECT 1 FROM issues WHERE id = ?", (issue_id,)).fetchone() is None:
            msg = f"Issue not found: {issue_id}"
            raise NotFoundError(msg)

    def _insert_tags(self, issue_id: int, tag_ids: Sequence[int]) -> None:
        self.conn.executemany(
            "INSERT INTO issue_tags (issue_id, tag_id) VALUES (?, ?)",
            [(issue_id, tag_id) for tag_id in tag_ids],
        )

    # -- Reads -------------------------------------------------------------------

    def get_issue(self, issue_id: int) -> Issue:
        q = build_issue_lookup(issue_id)
        with self.snapshot() as conn:
            row = conn.execute(q.sql, q.params).fetchone()
            if row is None:
                msg = f"Issue not found: {issue_id}"
                raise NotFoundError(msg)
            return next(self._project([row]))

    def count_issues(self, filters: IssueFilter | None = None) -> int:
        q = build_count_query(filters or IssueFilter())
        total: int = self.conn.execute(q.sql, q.params).fetchone()["total"]
        return total

    def list_issues(self, filters: IssueFilter | None = None, page: PageRequest | None = None) -> IssuePage:
        """Return one page of issues matching *filters*, newest first.

        The count, the page rows, and their tags are read in one snapshot, so
        ``pagination.total`` always agrees with the rows returned.
        """
        filters = filters or IssueFilter()
        page = page or PageRequest()
        page_q = build_page_query(filters, page)
        with self.snapshot() as conn:
            total = self.count_issues(filters)
            rows = conn.execute(page_q.sql, page_q.params).fetchall()
            issues = self._project(rows)
        logger.debug("list_issues matched %d issue(s), returning page %d", total, page.page)
        return IssuePage(pagination=Pagination(page=page.page, limit=page.limit, total=total), issues=issues)

    # -- Mutations ---------------------------------------------------------------

    def create_issue(self, payload: IssueCreate, *, actor_id: str) -> Issue:
        """Insert an issue and its tag associations as one unit.

        An unknown tag id (or assignee, or actor) rolls back the issue row too.
        """
        now = _now_epoch()
        try:
            with self.atomic() as conn:
                cursor = conn.execute(
                    "INSERT INTO issues (title, description, status, priority, assigned_user_id, "
                    "created_by_user_id, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        payload.title,
                        payload.description,
                        payload.status,
                        payload.priority,
                        payload.assigned_user_id,
                        actor_id,
                        now,
                        now,
                    ),
                )
                issue_id = cursor.lastrowid
                if issue_id is None:  # pragma: no cover
                    msg = "INSERT did not produce a lastrowid"
                    raise RuntimeError(msg)
                if payload.tag_ids:
                    self._insert_tags(issue_id, payload.tag_ids)
                issue = self.get_issue(issue_id)
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc) from exc
        logger.info("Issue %d created by %s", issue.id, actor_id)
        return issue

    def update_issue(self, issue_id: int, patch: IssuePatch) -> Issue:
        """Apply a partial update. Only fields present in *patch* change.

        A present ``tag_ids`` (even empty) replaces the whole tag set; an absent
        one leaves associations untouched. ``updated_at`` moves strictly
        forward whenever a scalar field changes; a tag-only patch leaves it be.
        """
        self._require_issue(issue_id)
        if patch.is_empty():
            return self.get_issue(issue_id)

        changes = patch.scalar_changes()

        try:
            with self.atomic() as conn:
                if changes:
                    # column names come from the fixed SCALAR_FIELDS list, never from input
                    sets = [f"{column} = ?" for column, _ in changes]
                    sets.append("updated_at = MAX(?, updated_at + 1)")
                    params = [value for _, value in changes] + [_now_epoch(), issue_id]
                    cursor = conn.execute(f"UPDATE issues SET {', '.join(sets)} WHERE id = ?", params)
                    if cursor.rowcount == 0:
                        msg = f"Issue not found: {issue_id}"
                        raise NotFoundError(msg)
                if isinstance(patch.tag_ids, Present):
                    conn.execute("DELETE FROM issue_tags WHERE issue_id = ?", (issue_id,))
                    self._insert_tags(issue_id, patch.tag_ids.value)
                return self.get_issue(issue_id)
        except sqlite3.IntegrityError as exc:
            raise translate_integrity_error(exc) from exc

    def delete_issue(self, issue_id: int) -> None:
        with self.atomic() as conn:
            cursor = conn.execute("DELETE FROM issues WHERE id = ?", (issue_id,))
            if cursor.rowcount == 0:
                msg = f"Issue not found: {issue_id}"
                raise NotFoundError(msg)
        logger.info("Issue %d deleted", issue_id)
