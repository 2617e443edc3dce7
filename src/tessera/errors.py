"""Error taxonomy shared by the store, the HTTP layer, and the CLI.

Each class carries the HTTP status and envelope code it maps to, so route
handlers never need to know which operation raised it.
"""

from __future__ import annotations

import sqlite3
from typing import Any


class TesseraError(Exception):
    """Base class for every error the core raises on purpose."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(TesseraError, ValueError):
    """Malformed or out-of-range input."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, messages: str | list[str], *, details: dict[str, Any] | None = None) -> None:
        self.errors = [messages] if isinstance(messages, str) else list(messages)
        super().__init__("; ".join(self.errors), details=details)


class NotFoundError(TesseraError, KeyError):
    """A referenced entity does not exist.

    Subclasses ``KeyError`` so lookups read like dict access; ``__str__`` is
    overridden because ``KeyError`` would otherwise quote the message.
    """

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(TesseraError, ValueError):
    """Uniqueness, in-use, or referential violation."""

    code = "CONFLICT"
    status_code = 409


class UnauthorizedError(TesseraError):
    """No actor could be resolved for a request that needs one."""

    code = "UNAUTHORIZED"
    status_code = 401


def translate_integrity_error(exc: sqlite3.IntegrityError) -> TesseraError:
    """Map a raw SQLite constraint failure onto the error taxonomy."""
    name = getattr(exc, "sqlite_errorname", "") or ""
    text = str(exc)
    if "FOREIGNKEY" in name or "FOREIGN KEY" in text:
        return ConflictError("Invalid reference to related resource", details={"constraint": "foreign_key"})
    if "UNIQUE" in name or "PRIMARYKEY" in name or "UNIQUE constraint" in text:
        return ConflictError("Resource already exists", details={"constraint": "unique"})
    if "CHECK" in name or "NOTNULL" in name or "CHECK constraint" in text or "NOT NULL constraint" in text:
        return ValidationError("Value violates a store constraint", details={"constraint": text})
    return ConflictError("Store constraint violated", details={"constraint": text})
