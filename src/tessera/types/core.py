# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
# NEVER import from core.py, db_base.py, or any mixin.
"""Domain records returned by the store and their JSON wire shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, NewType, TypedDict

ISOTimestamp = NewType("ISOTimestamp", str)

Status = Literal["not_started", "in_progress", "done"]
Priority = Literal["low", "medium", "high"]

VALID_STATUSES: tuple[str, ...] = ("not_started", "in_progress", "done")
VALID_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")


# ---------------------------------------------------------------------------
# Wire shapes
# ---------------------------------------------------------------------------


class UserRefDict(TypedDict):
    id: str
    name: str
    email: str


class TagRefDict(TypedDict):
    id: int
    name: str
    color: str


class TagDict(TagRefDict):
    created_at: ISOTimestamp


class IssueDict(TypedDict):
    id: int
    title: str
    description: str | None
    status: str
    priority: str
    assigned_user_id: str | None
    created_by_user_id: str
    created_at: ISOTimestamp
    updated_at: ISOTimestamp
    assigned_user: UserRefDict | None
    created_by_user: UserRefDict
    tags: list[TagRefDict]


class PaginationDict(TypedDict):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class IssueListResult(TypedDict):
    """Envelope returned by ``GET /api/issues``."""

    issues: list[IssueDict]
    pagination: PaginationDict


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserRef:
    id: str
    name: str
    email: str

    def to_dict(self) -> UserRefDict:
        return UserRefDict(id=self.id, name=self.name, email=self.email)


@dataclass(frozen=True)
class Tag:
    id: int
    name: str
    color: str
    created_at: str = ""

    def to_ref(self) -> TagRefDict:
        return TagRefDict(id=self.id, name=self.name, color=self.color)

    def to_dict(self) -> TagDict:
        return TagDict(id=self.id, name=self.name, color=self.color, created_at=ISOTimestamp(self.created_at))


@dataclass
class Issue:
    id: int
    title: str
    created_by_user: UserRef
    description: str | None = None
    status: str = "not_started"
    priority: str = "medium"
    assigned_user: UserRef | None = None
    created_at: str = ""
    updated_at: str = ""
    # Computed (not stored on the issue row)
    tags: list[Tag] = field(default_factory=list)

    @property
    def assigned_user_id(self) -> str | None:
        return self.assigned_user.id if self.assigned_user is not None else None

    @property
    def created_by_user_id(self) -> str:
        return self.created_by_user.id

    def to_dict(self) -> IssueDict:
        return IssueDict(
            id=self.id,
            title=self.title,
            description=self.description,
            status=self.status,
            priority=self.priority,
            assigned_user_id=self.assigned_user_id,
            created_by_user_id=self.created_by_user_id,
            created_at=ISOTimestamp(self.created_at),
            updated_at=ISOTimestamp(self.updated_at),
            assigned_user=self.assigned_user.to_dict() if self.assigned_user is not None else None,
            created_by_user=self.created_by_user.to_dict(),
            tags=[t.to_ref() for t in self.tags],
        )
