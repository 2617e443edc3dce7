"""Assemble joined store rows into nested Issue records."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator, Mapping

from tessera.db_base import _epoch_to_iso
from tessera.types.core import Issue, Tag, UserRef


def tag_from_row(row: sqlite3.Row) -> Tag:
    return Tag(id=row["id"], name=row["name"], color=row["color"], created_at=_epoch_to_iso(row["created_at"]))


def group_tags(rows: Iterable[sqlite3.Row]) -> dict[int, list[Tag]]:
    """Bucket ``build_tag_lookup`` rows by issue id, keeping row order."""
    grouped: dict[int, list[Tag]] = {}
    for r in rows:
        grouped.setdefault(r["issue_id"], []).append(tag_from_row(r))
    return grouped


def issue_from_row(row: sqlite3.Row, tags: list[Tag]) -> Issue:
    assigned: UserRef | None = None
    if row["assigned_user_id"] is not None:
        assigned = UserRef(
            id=row["assigned_user_id"],
            name=row["assigned_user_name"],
            email=row["assigned_user_email"],
        )
    return Issue(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        status=row["status"],
        priority=row["priority"],
        assigned_user=assigned,
        created_by_user=UserRef(
            id=row["created_by_user_id"],
            name=row["created_by_user_name"],
            email=row["created_by_user_email"],
        ),
        created_at=_epoch_to_iso(row["created_at"]),
        updated_at=_epoch_to_iso(row["updated_at"]),
        tags=tags,
    )


def project_issues(rows: Iterable[sqlite3.Row], tags_by_issue: Mapping[int, list[Tag]]) -> Iterator[Issue]:
    """Lazily yield one Issue per row, in row order."""
    for row in rows:
        yield issue_from_row(row, list(tags_by_issue.get(row["id"], [])))
