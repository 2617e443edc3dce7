"""Query builder for filtered, paginated issue retrieval.

Every filter becomes a ``Predicate``: a fixed SQL fragment plus the values it
binds. Fragments are joined with ``AND``; values only ever travel as bound
parameters, never as SQL text.

The count query and the page query are built from the same predicate list,
so ``total`` always describes exactly the set the pages are cut from.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tessera.db_base import fits_sqlite_int
from tessera.errors import ValidationError
from tessera.types.core import IssueListResult, PaginationDict

if TYPE_CHECKING:
    from tessera.types.core import Issue

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Issue row joined with assignee and creator identity. The projection layer
# reads these aliases by name.
_ISSUE_SELECT = (
    "SELECT i.id, i.title, i.description, i.status, i.priority, "
    "i.assigned_user_id, i.created_by_user_id, i.created_at, i.updated_at, "
    "au.name AS assigned_user_name, au.email AS assigned_user_email, "
    "cu.name AS created_by_user_name, cu.email AS created_by_user_email "
    "FROM issues i "
    "LEFT JOIN users au ON au.id = i.assigned_user_id "
    "LEFT JOIN users cu ON cu.id = i.created_by_user_id"
)

_PAGE_ORDER = "ORDER BY i.created_at DESC, i.id DESC"


@dataclass(frozen=True)
class Predicate:
    sql: str
    params: tuple[Any, ...] = ()


@dataclass(frozen=True)
class BoundQuery:
    sql: str
    params: tuple[Any, ...] = ()


def _placeholders(count: int) -> str:
    return ",".join("?" * count)


@dataclass(frozen=True)
class IssueFilter:
    """Optional issue filters. ``None`` (or an empty ``tag_ids``) means "not filtered"."""

    status: str | None = None
    assigned_user_id: str | None = None
    created_by_user_id: str | None = None
    priority: str | None = None
    search: str | None = None
    tag_ids: tuple[int, ...] = ()

    def predicates(self) -> list[Predicate]:
        preds: list[Predicate] = []
        if self.status is not None:
            preds.append(Predicate("i.status = ?", (self.status,)))
        if self.assigned_user_id is not None:
            preds.append(Predicate("i.assigned_user_id = ?", (self.assigned_user_id,)))
        if self.created_by_user_id is not None:
            preds.append(Predicate("i.created_by_user_id = ?", (self.created_by_user_id,)))
        if self.priority is not None:
            preds.append(Predicate("i.priority = ?", (self.priority,)))
        if self.search is not None:
            # LIKE wildcards in the term are passed through unescaped.
            pattern = f"%{self.search}%"
            preds.append(Predicate("(i.title LIKE ? OR i.description LIKE ?)", (pattern, pattern)))
        if self.tag_ids:
            preds.append(
                Predicate(
                    f"i.id IN (SELECT issue_id FROM issue_tags WHERE tag_id IN ({_placeholders(len(self.tag_ids))}))",
                    tuple(self.tag_ids),
                )
            )
        return preds


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        errors: list[str] = []
        if self.page < 1:
            errors.append("Page must be greater than 0")
        if self.limit < 1:
            errors.append("Limit must be greater than 0")
        if errors:
            raise ValidationError(errors)
        if self.limit > MAX_PAGE_SIZE:
            object.__setattr__(self, "limit", MAX_PAGE_SIZE)
        if not fits_sqlite_int(self.offset):
            raise ValidationError("Page is out of range")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def where_clause(predicates: Sequence[Predicate]) -> tuple[str, tuple[Any, ...]]:
    """Join predicates with AND. Returns ``("", ())`` when there are none."""
    if not predicates:
        return "", ()
    sql = " WHERE " + " AND ".join(p.sql for p in predicates)
    params: tuple[Any, ...] = ()
    for p in predicates:
        params += p.params
    return sql, params


def build_count_query(filters: IssueFilter) -> BoundQuery:
    where, params = where_clause(filters.predicates())
    return BoundQuery(f"SELECT COUNT(*) AS total FROM issues i{where}", params)


def build_page_query(filters: IssueFilter, page: PageRequest) -> BoundQuery:
    where, params = where_clause(filters.predicates())
    return BoundQuery(
        f"{_ISSUE_SELECT}{where} {_PAGE_ORDER} LIMIT ? OFFSET ?",
        (*params, page.limit, page.offset),
    )


def build_issue_lookup(issue_id: int) -> BoundQuery:
    return BoundQuery(f"{_ISSUE_SELECT} WHERE i.id = ?", (issue_id,))


def build_tag_lookup(issue_ids: Sequence[int]) -> BoundQuery:
    """Tags for a batch of issues, one row per association."""
    return BoundQuery(
        "SELECT it.issue_id, t.id, t.name, t.color, t.created_at "
        "FROM issue_tags it JOIN tags t ON t.id = it.tag_id "
        f"WHERE it.issue_id IN ({_placeholders(len(issue_ids))}) "
        "ORDER BY t.name, t.id",
        tuple(issue_ids),
    )


# ---------------------------------------------------------------------------
# Pagination envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> PaginationDict:
        return PaginationDict(
            page=self.page,
            limit=self.limit,
            total=self.total,
            totalPages=self.total_pages,
            hasNext=self.has_next,
            hasPrev=self.has_prev,
        )


@dataclass
class IssuePage:
    """One page of issues. ``issues`` is a single-pass iterator."""

    pagination: Pagination
    issues: Iterator[Issue] = field(default_factory=lambda: iter(()))

    def to_dict(self) -> IssueListResult:
        return IssueListResult(
            issues=[issue.to_dict() for issue in self.issues],
            pagination=self.pagination.to_dict(),
        )
