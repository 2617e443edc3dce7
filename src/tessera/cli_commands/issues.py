"""CLI commands for reading issues and tags: list, show, tags."""

from __future__ import annotations

import json as json_mod

import click

from tessera.cli_common import fail, get_db
from tessera.db_base import fits_sqlite_int
from tessera.errors import TesseraError
from tessera.validation import parse_issue_filter, parse_page_request


@click.command("list")
@click.option("--status", default=None, help="Filter by status (not_started, in_progress, done)")
@click.option("--priority", "-p", default=None, help="Filter by priority (low, medium, high)")
@click.option("--assignee", default=None, help="Filter by assigned user id")
@click.option("--creator", default=None, help="Filter by creating user id")
@click.option("--search", "-s", default=None, help="Substring of title or description")
@click.option("--tags", "tag_ids", default=None, help="Comma-separated tag ids (any match)")
@click.option("--page", default="1", help="Page number (default 1)")
@click.option("--limit", default="10", help="Page size (default 10, max 100)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_issues(
    status: str | None,
    priority: str | None,
    assignee: str | None,
    creator: str | None,
    search: str | None,
    tag_ids: str | None,
    page: str,
    limit: str,
    as_json: bool,
) -> None:
    """List issues, newest first, with the same filters as GET /api/issues."""
    params = {
        "status": status,
        "priority": priority,
        "assigned_user_id": assignee,
        "created_by_user_id": creator,
        "search": search,
        "tag_ids": tag_ids,
        "page": page,
        "limit": limit,
    }
    query = {k: v for k, v in params.items() if v is not None}
    with get_db() as db:
        try:
            result = db.list_issues(parse_issue_filter(query), parse_page_request(query))
        except TesseraError as e:
            fail(str(e), as_json=as_json)
        data = result.to_dict()

    if as_json:
        click.echo(json_mod.dumps(data, indent=2))
        return

    for issue in data["issues"]:
        tags = ",".join(t["name"] for t in issue["tags"])
        tag_note = f" [{tags}]" if tags else ""
        click.echo(f"#{issue['id']:<5} {issue['status']:<12} {issue['priority']:<7} {issue['title']}{tag_note}")

    p = data["pagination"]
    click.echo(f"\n{p['total']} issues (page {p['page']} of {max(p['totalPages'], 1)})")


@click.command()
@click.argument("issue_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(issue_id: int, as_json: bool) -> None:
    """Show issue details."""
    if not fits_sqlite_int(issue_id):
        fail(f"Issue not found: {issue_id}", as_json=as_json)
    with get_db() as db:
        try:
            issue = db.get_issue(issue_id)
        except TesseraError as e:
            fail(str(e), as_json=as_json)

    if as_json:
        click.echo(json_mod.dumps(issue.to_dict(), indent=2))
        return

    click.echo(f"#{issue.id}: {issue.title}")
    click.echo(f"  Status:   {issue.status}")
    click.echo(f"  Priority: {issue.priority}")
    assignee = issue.assigned_user.name if issue.assigned_user is not None else "(unassigned)"
    click.echo(f"  Assignee: {assignee}")
    click.echo(f"  Creator:  {issue.created_by_user.name}")
    if issue.tags:
        click.echo(f"  Tags:     {', '.join(t.name for t in issue.tags)}")
    click.echo(f"  Created:  {issue.created_at}")
    click.echo(f"  Updated:  {issue.updated_at}")
    if issue.description:
        click.echo(f"\n{issue.description}")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tags(as_json: bool) -> None:
    """List tags by name."""
    with get_db() as db:
        all_tags = db.list_tags()

    if as_json:
        click.echo(json_mod.dumps([t.to_dict() for t in all_tags], indent=2))
        return

    for tag in all_tags:
        click.echo(f"{tag.id:<5} {tag.color}  {tag.name}")
    click.echo(f"\n{len(all_tags)} tags")


def register(cli: click.Group) -> None:
    """Register issue and tag commands with the CLI group."""
    cli.add_command(list_issues)
    cli.add_command(show)
    cli.add_command(tags)
