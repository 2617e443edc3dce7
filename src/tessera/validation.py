"""Shared validation functions for all entry points.

Pure functions with no FastAPI or store dependencies. Mutation payload
checks accumulate every violated rule and raise a single ``ValidationError``
listing all of them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from tessera.db_base import fits_sqlite_int
from tessera.errors import ValidationError
from tessera.query import DEFAULT_PAGE_SIZE, IssueFilter, PageRequest
from tessera.types.core import VALID_PRIORITIES, VALID_STATUSES
from tessera.types.inputs import ABSENT, IssueCreate, IssuePatch, Present, TagCreate

MAX_TITLE_LENGTH = 200
MAX_TAG_NAME_LENGTH = 50

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _is_int(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and fits_sqlite_int(value)


def issue_payload_errors(data: Mapping[str, Any], *, partial: bool = False) -> list[str]:
    """Return every rule an issue payload violates (empty list when valid).

    *partial* selects update rules: title becomes optional, but a present
    title is checked exactly as on create.
    """
    errors: list[str] = []

    if not partial and not data.get("title"):
        errors.append("Title is required")

    if "title" in data:
        title = data["title"]
        if not isinstance(title, str):
            errors.append("Title must be a string")
        elif len(title) == 0:
            errors.append("Title cannot be empty")
        elif len(title) > MAX_TITLE_LENGTH:
            errors.append(f"Title must be {MAX_TITLE_LENGTH} characters or less")

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        errors.append("Description must be a string")

    if "status" in data and data["status"] not in VALID_STATUSES:
        errors.append(f"Status must be one of: {', '.join(VALID_STATUSES)}")

    if "priority" in data and data["priority"] not in VALID_PRIORITIES:
        errors.append(f"Priority must be one of: {', '.join(VALID_PRIORITIES)}")

    assignee = data.get("assigned_user_id")
    if assignee is not None and not isinstance(assignee, str):
        errors.append("assigned_user_id must be a string")

    tag_ids = data.get("tag_ids")
    if tag_ids is not None:
        if not isinstance(tag_ids, list):
            errors.append("tag_ids must be an array")
        elif not all(_is_int(t) for t in tag_ids):
            errors.append("tag_ids must be an array of integers")

    return errors


def parse_issue_create(data: Mapping[str, Any]) -> IssueCreate:
    errors = issue_payload_errors(data)
    if errors:
        raise ValidationError(errors)
    tag_ids = data.get("tag_ids")
    return IssueCreate(
        title=data["title"],
        description=data.get("description") or None,
        status=data.get("status") or "not_started",
        priority=data.get("priority") or "medium",
        assigned_user_id=data.get("assigned_user_id") or None,
        tag_ids=tuple(tag_ids) if tag_ids is not None else None,
    )


def parse_issue_patch(data: Mapping[str, Any]) -> IssuePatch:
    """Build an IssuePatch where only keys present in *data* are marked Present.

    An explicit ``"tag_ids": null`` counts as present and clears the tag set.
    """
    errors = issue_payload_errors(data, partial=True)
    if errors:
        raise ValidationError(errors)

    def slot(name: str) -> Any:
        return Present(data[name]) if name in data else ABSENT

    tag_slot: Any = ABSENT
    if "tag_ids" in data:
        tag_slot = Present(tuple(data["tag_ids"] or ()))

    return IssuePatch(
        title=slot("title"),
        description=slot("description"),
        status=slot("status"),
        priority=slot("priority"),
        assigned_user_id=slot("assigned_user_id"),
        tag_ids=tag_slot,
    )


def parse_tag_create(data: Mapping[str, Any]) -> TagCreate:
    errors: list[str] = []

    name = data.get("name")
    if not name:
        errors.append("Name is required")
    elif not isinstance(name, str):
        errors.append("Name must be a string")
    elif len(name) > MAX_TAG_NAME_LENGTH:
        errors.append(f"Name must be {MAX_TAG_NAME_LENGTH} characters or less")

    color = data.get("color")
    if not color:
        errors.append("Color is required")
    elif not isinstance(color, str):
        errors.append("Color must be a string")
    elif not _HEX_COLOR.match(color):
        errors.append("Color must be a valid hex color (e.g., #ef4444)")

    if errors:
        raise ValidationError(errors)
    return TagCreate(name=name, color=color)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Query-string parsing
# ---------------------------------------------------------------------------


def _blank_to_none(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    return value


def _leading_int(raw: str | None) -> int | None:
    """Integer prefix of *raw* (``"12abc"`` -> 12), or None when there is none."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def parse_tag_id_list(raw: str | None) -> tuple[int, ...]:
    """Parse ``"1,2,3"``; parts that are not storable integers are dropped."""
    if not raw:
        return ()
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        try:
            tag_id = int(part)
        except ValueError:
            continue
        if fits_sqlite_int(tag_id):
            ids.append(tag_id)
    return tuple(ids)


def parse_page_request(params: Mapping[str, str]) -> PageRequest:
    """Lenient paging: missing, non-numeric, and zero values fall back to the defaults.

    Negative values still fail in ``PageRequest``; an oversized limit is clamped.
    """
    page = _leading_int(params.get("page")) or 1
    limit = _leading_int(params.get("limit")) or DEFAULT_PAGE_SIZE
    return PageRequest(page=page, limit=limit)


def parse_issue_filter(params: Mapping[str, str]) -> IssueFilter:
    return IssueFilter(
        status=_blank_to_none(params.get("status")),
        assigned_user_id=_blank_to_none(params.get("assigned_user_id")),
        created_by_user_id=_blank_to_none(params.get("created_by_user_id")),
        priority=_blank_to_none(params.get("priority")),
        search=_blank_to_none(params.get("search")),
        tag_ids=parse_tag_id_list(params.get("tag_ids")),
    )
