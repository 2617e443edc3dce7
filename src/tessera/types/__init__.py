"""Typed records and payload contracts for tessera core and API layers."""

from __future__ import annotations

from tessera.types.core import (
    VALID_PRIORITIES,
    VALID_STATUSES,
    ISOTimestamp,
    Issue,
    IssueDict,
    IssueListResult,
    PaginationDict,
    Tag,
    TagDict,
    UserRef,
)
from tessera.types.inputs import ABSENT, IssueCreate, IssuePatch, Present, TagCreate

__all__ = [
    "ABSENT",
    "ISOTimestamp",
    "Issue",
    "IssueCreate",
    "IssueDict",
    "IssueListResult",
    "IssuePatch",
    "PaginationDict",
    "Present",
    "Tag",
    "TagCreate",
    "TagDict",
    "UserRef",
    "VALID_PRIORITIES",
    "VALID_STATUSES",
]
