"""Tessera — issue tracking API over a single SQLite database."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tessera")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from tessera.core import Issue, Tag, TesseraDB

__all__ = ["Issue", "Tag", "TesseraDB", "__version__"]
