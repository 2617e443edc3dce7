"""Shared CLI helpers.

Provides ``get_db()`` and ``fail()`` so that both ``cli.py`` and the
``cli_commands/*.py`` modules can use them without circular imports.
"""

from __future__ import annotations

import json as json_mod
import sys
from typing import NoReturn

import click

from tessera.config import TESSERA_DIR_NAME
from tessera.core import TesseraDB


def get_db() -> TesseraDB:
    """Discover .tessera/ and return an initialized TesseraDB."""
    try:
        return TesseraDB.from_project()
    except FileNotFoundError:
        click.echo(f"No {TESSERA_DIR_NAME}/ found. Run 'tessera init' first.", err=True)
        sys.exit(1)


def fail(message: str, *, as_json: bool = False) -> NoReturn:
    """Report *message* on the channel the caller asked for and exit 1."""
    if as_json:
        click.echo(json_mod.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(1)
