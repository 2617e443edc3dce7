# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""Validated mutation payloads handed to the store.

Partial updates distinguish "field not sent" from "field sent as null" with
an explicit wrapper: every ``IssuePatch`` field is either ``Present(value)``
or the ``ABSENT`` marker. ``None`` inside ``Present`` is a real value
(e.g. clearing the assignee).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class Absent:
    """Marker for a payload field the caller did not send."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


@dataclass(frozen=True)
class Present(Generic[T]):
    value: T


Patch = Union[Present[T], Absent]

# Columns an IssuePatch may write directly; tag_ids is handled separately.
SCALAR_FIELDS: tuple[str, ...] = ("title", "description", "status", "priority", "assigned_user_id")


@dataclass(frozen=True)
class IssueCreate:
    title: str
    description: str | None = None
    status: str = "not_started"
    priority: str = "medium"
    assigned_user_id: str | None = None
    tag_ids: tuple[int, ...] | None = None


@dataclass(frozen=True)
class IssuePatch:
    title: Patch[str] = ABSENT
    description: Patch[str | None] = ABSENT
    status: Patch[str] = ABSENT
    priority: Patch[str] = ABSENT
    assigned_user_id: Patch[str | None] = ABSENT
    tag_ids: Patch[tuple[int, ...]] = ABSENT

    def scalar_changes(self) -> list[tuple[str, Any]]:
        """Return ``(column, value)`` for each present scalar field, in column order."""
        changes: list[tuple[str, Any]] = []
        for name in SCALAR_FIELDS:
            slot = getattr(self, name)
            if isinstance(slot, Present):
                changes.append((name, slot.value))
        return changes

    def is_empty(self) -> bool:
        return not any(isinstance(getattr(self, f.name), Present) for f in fields(self))


@dataclass(frozen=True)
class TagCreate:
    name: str
    color: str
