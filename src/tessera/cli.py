"""CLI for the tessera issue tracker.

Convention-based: discovers .tessera/ by walking up from cwd.

Usage:
    tessera init                                 # Initialize .tessera/ in cwd
    tessera serve --port 3000                    # Run the HTTP API
    tessera add-user ada@example.com "Ada"       # Register a user
    tessera issue-token <user-id>                # Print a bearer token
    tessera list --status=in_progress --tags=1,2 # List issues
    tessera show 42                              # Show issue details
    tessera tags                                 # List tags
    tessera config                               # Effective configuration
"""

from __future__ import annotations

import click

from tessera import __version__
from tessera.cli_commands import admin, issues


@click.group()
@click.version_option(version=__version__, prog_name="tessera")
def cli() -> None:
    """Tessera — issue tracking API over SQLite."""


admin.register(cli)
issues.register(cli)


if __name__ == "__main__":
    cli()
