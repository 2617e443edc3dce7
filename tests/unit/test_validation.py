"""Tests for the shared validation module."""

from __future__ import annotations

import pytest

from tessera.errors import ValidationError
from tessera.query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tessera.types.inputs import ABSENT, Present
from tessera.validation import (
    issue_payload_errors,
    parse_issue_create,
    parse_issue_filter,
    parse_issue_patch,
    parse_page_request,
    parse_tag_create,
    parse_tag_id_list,
)


class TestIssuePayloadErrors:
    """issue_payload_errors() pure function tests."""

    def test_valid_minimal(self) -> None:
        assert issue_payload_errors({"title": "Fix it"}) == []

    def test_missing_title(self) -> None:
        assert "Title is required" in issue_payload_errors({})

    def test_title_not_a_string(self) -> None:
        assert issue_payload_errors({"title": 42}) == ["Title must be a string"]

    def test_title_at_max_length(self) -> None:
        assert issue_payload_errors({"title": "a" * 200}) == []

    def test_title_over_max_length(self) -> None:
        assert issue_payload_errors({"title": "a" * 201}) == ["Title must be 200 characters or less"]

    def test_all_violations_accumulate(self) -> None:
        errors = issue_payload_errors({"status": "closed", "priority": "urgent", "tag_ids": "1,2"})
        assert errors == [
            "Title is required",
            "Status must be one of: not_started, in_progress, done",
            "Priority must be one of: low, medium, high",
            "tag_ids must be an array",
        ]

    def test_description_must_be_string(self) -> None:
        assert issue_payload_errors({"title": "x", "description": 5}) == ["Description must be a string"]

    def test_null_description_allowed(self) -> None:
        assert issue_payload_errors({"title": "x", "description": None}) == []

    def test_assignee_must_be_string(self) -> None:
        assert issue_payload_errors({"title": "x", "assigned_user_id": 7}) == ["assigned_user_id must be a string"]

    def test_tag_ids_must_be_integers(self) -> None:
        assert issue_payload_errors({"title": "x", "tag_ids": [1, "2"]}) == ["tag_ids must be an array of integers"]

    def test_bool_is_not_a_tag_id(self) -> None:
        """bool is a subclass of int and is rejected."""
        assert issue_payload_errors({"title": "x", "tag_ids": [True]}) == ["tag_ids must be an array of integers"]

    @pytest.mark.parametrize("tag_id", [2**63, -(2**63) - 1, 2**70])
    def test_tag_id_beyond_sqlite_integer(self, tag_id: int) -> None:
        assert issue_payload_errors({"title": "x", "tag_ids": [tag_id]}) == ["tag_ids must be an array of integers"]

    def test_tag_id_at_sqlite_bounds_accepted(self) -> None:
        assert issue_payload_errors({"title": "x", "tag_ids": [2**63 - 1, -(2**63)]}) == []

    def test_partial_allows_missing_title(self) -> None:
        assert issue_payload_errors({"status": "done"}, partial=True) == []

    def test_partial_still_rejects_empty_title(self) -> None:
        assert issue_payload_errors({"title": ""}, partial=True) == ["Title cannot be empty"]


class TestParseIssueCreate:
    def test_defaults_applied(self) -> None:
        payload = parse_issue_create({"title": "New"})
        assert payload.status == "not_started"
        assert payload.priority == "medium"
        assert payload.tag_ids is None

    def test_empty_description_becomes_none(self) -> None:
        assert parse_issue_create({"title": "New", "description": ""}).description is None

    def test_tag_ids_tuple(self) -> None:
        assert parse_issue_create({"title": "New", "tag_ids": [3, 1]}).tag_ids == (3, 1)

    def test_raises_with_every_message(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_issue_create({"priority": "extreme"})
        assert exc_info.value.errors == ["Title is required", "Priority must be one of: low, medium, high"]
        assert str(exc_info.value) == "Title is required; Priority must be one of: low, medium, high"


class TestParseIssuePatch:
    def test_only_sent_keys_present(self) -> None:
        patch = parse_issue_patch({"status": "done"})
        assert patch.status == Present("done")
        assert patch.title is ABSENT
        assert patch.tag_ids is ABSENT
        assert patch.scalar_changes() == [("status", "done")]

    def test_null_tag_ids_clears(self) -> None:
        assert parse_issue_patch({"tag_ids": None}).tag_ids == Present(())

    def test_empty_tag_ids_clears(self) -> None:
        assert parse_issue_patch({"tag_ids": []}).tag_ids == Present(())

    def test_null_assignee_is_present(self) -> None:
        assert parse_issue_patch({"assigned_user_id": None}).assigned_user_id == Present(None)

    def test_empty_body_is_empty_patch(self) -> None:
        assert parse_issue_patch({}).is_empty()

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Status must be one of"):
            parse_issue_patch({"status": "archived"})


class TestParseTagCreate:
    def test_valid(self) -> None:
        tag = parse_tag_create({"name": "infra", "color": "#A1b2C3"})
        assert (tag.name, tag.color) == ("infra", "#A1b2C3")

    def test_missing_both(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_tag_create({})
        assert exc_info.value.errors == ["Name is required", "Color is required"]

    def test_name_too_long(self) -> None:
        with pytest.raises(ValidationError, match="50 characters or less"):
            parse_tag_create({"name": "n" * 51, "color": "#000000"})

    @pytest.mark.parametrize("color", ["red", "#fff", "#12345g", "123456", "#1234567"])
    def test_bad_colors(self, color: str) -> None:
        with pytest.raises(ValidationError, match="valid hex color"):
            parse_tag_create({"name": "x", "color": color})

    def test_non_string_color(self) -> None:
        with pytest.raises(ValidationError, match="Color must be a string"):
            parse_tag_create({"name": "x", "color": 123456})


class TestQueryParams:
    def test_tag_id_list_drops_junk(self) -> None:
        assert parse_tag_id_list("1, x,3,") == (1, 3)

    def test_tag_id_list_empty(self) -> None:
        assert parse_tag_id_list("") == ()
        assert parse_tag_id_list(None) == ()

    def test_page_defaults(self) -> None:
        page = parse_page_request({})
        assert (page.page, page.limit) == (1, DEFAULT_PAGE_SIZE)

    @pytest.mark.parametrize("raw", ["abc", "0", "-0", ""])
    def test_unusable_page_uses_default(self, raw: str) -> None:
        assert parse_page_request({"page": raw}).page == 1

    @pytest.mark.parametrize("raw", ["abc", "0", ""])
    def test_unusable_limit_uses_default(self, raw: str) -> None:
        assert parse_page_request({"limit": raw}).limit == DEFAULT_PAGE_SIZE

    def test_leading_digits_parsed(self) -> None:
        page = parse_page_request({"page": " 3rd", "limit": "25.5"})
        assert (page.page, page.limit) == (3, 25)

    def test_negative_limit_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Limit must be greater than 0"):
            parse_page_request({"limit": "-1"})

    def test_page_beyond_storable_offset_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Page is out of range"):
            parse_page_request({"page": str(2**63)})

    def test_tag_id_list_drops_out_of_range(self) -> None:
        assert parse_tag_id_list(f"4,{2**63},-{2**63 + 1}") == (4,)

    def test_large_limit_clamped(self) -> None:
        assert parse_page_request({"limit": "1000"}).limit == MAX_PAGE_SIZE

    def test_filter_blank_values_ignored(self) -> None:
        filters = parse_issue_filter({"status": "", "search": "crash", "tag_ids": "2,5"})
        assert filters.status is None
        assert filters.search == "crash"
        assert filters.tag_ids == (2, 5)
