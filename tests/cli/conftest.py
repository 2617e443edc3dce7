"""Fixtures for CLI interface tests."""

from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from tessera.cli import cli


@pytest.fixture
def cli_in_project(
    tmp_path: Path, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> Generator[tuple[CliRunner, Path], None, None]:
    """Initialize a tessera project in tmp_path and return (runner, project_root)."""
    for var in ("TESSERA_DB_PATH", "TESSERA_HOST", "TESSERA_PORT", "TESSERA_ENV"):
        monkeypatch.delenv(var, raising=False)
    original_cwd = os.getcwd()
    os.chdir(str(tmp_path))
    result = cli_runner.invoke(cli, ["init"])
    assert result.exit_code == 0, result.output
    yield cli_runner, tmp_path
    os.chdir(original_cwd)


def _extract_user_id(add_user_output: str) -> str:
    """Extract the id from 'Created user <id>: Name <email>' output."""
    return add_user_output.split(":")[0].replace("Created user ", "").strip()
