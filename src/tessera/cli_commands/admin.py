"""CLI commands for admin: init, serve, add-user, issue-token."""

from __future__ import annotations

import json as json_mod
from pathlib import Path

import click

from tessera.auth import DEFAULT_SESSION_TTL, open_session, register_user
from tessera.cli_common import fail, get_db
from tessera.config import DB_FILENAME, TESSERA_DIR_NAME, AppConfig, find_tessera_root, read_config, write_config
from tessera.core import TesseraDB
from tessera.errors import TesseraError


@click.command()
@click.option("--no-seed", is_flag=True, help="Skip creating the default tag set")
def init(no_seed: bool) -> None:
    """Initialize .tessera/ in the current directory."""
    cwd = Path.cwd()
    tessera_dir = cwd / TESSERA_DIR_NAME

    if tessera_dir.exists():
        click.echo(f"{TESSERA_DIR_NAME}/ already exists in {cwd}")
        # Still ensure DB is initialized
        with TesseraDB(tessera_dir / DB_FILENAME) as db:
            db.initialize()
        return

    tessera_dir.mkdir()
    write_config(tessera_dir, AppConfig())

    with TesseraDB(tessera_dir / DB_FILENAME) as db:
        db.initialize()
        seeded = 0 if no_seed else db.seed_default_tags()

    click.echo(f"Initialized {TESSERA_DIR_NAME}/ in {cwd}")
    click.echo(f"  Database: {tessera_dir / DB_FILENAME}")
    click.echo(f"  Default tags: {seeded}")
    click.echo("\nNext: tessera add-user EMAIL NAME")


@click.command()
@click.option("--host", default=None, help="Bind address (default from config, 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Server port (default from config, 3000)")
def serve(host: str | None, port: int | None) -> None:
    """Run the HTTP API server."""
    from tessera.api import main as api_main

    try:
        api_main(host=host, port=port)
    except FileNotFoundError:
        fail(f"No {TESSERA_DIR_NAME}/ found. Run 'tessera init' first.")


@click.command("add-user")
@click.argument("email")
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def add_user(email: str, name: str, as_json: bool) -> None:
    """Register a user who can own and be assigned issues."""
    with get_db() as db:
        try:
            user = register_user(db, email=email, name=name)
        except TesseraError as e:
            fail(str(e), as_json=as_json)
    if as_json:
        click.echo(json_mod.dumps(user.to_dict(), indent=2))
    else:
        click.echo(f"Created user {user.id}: {user.name} <{user.email}>")


@click.command("issue-token")
@click.argument("user_id")
@click.option("--ttl", default=DEFAULT_SESSION_TTL, type=int, help="Lifetime in seconds (default 30 days)")
def issue_token(user_id: str, ttl: int) -> None:
    """Open a session for USER_ID and print its bearer token."""
    with get_db() as db:
        try:
            token = open_session(db, user_id, ttl_seconds=ttl)
        except TesseraError as e:
            fail(str(e))
    click.echo(token)


@click.command("config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_config(as_json: bool) -> None:
    """Show the effective server configuration (config.json plus env overrides)."""
    try:
        tessera_dir = find_tessera_root()
    except FileNotFoundError:
        fail(f"No {TESSERA_DIR_NAME}/ found. Run 'tessera init' first.", as_json=as_json)
    config = read_config(tessera_dir)
    if as_json:
        click.echo(json_mod.dumps(config.to_dict(), indent=2))
        return
    for key, value in config.to_dict().items():
        click.echo(f"{key}: {value}")


def register(cli: click.Group) -> None:
    """Register admin commands with the CLI group."""
    cli.add_command(init)
    cli.add_command(serve)
    cli.add_command(add_user)
    cli.add_command(issue_token)
    cli.add_command(show_config)
