"""Shared helpers and dependencies for API route modules."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi.responses import JSONResponse
from starlette.requests import Request

from tessera.auth import Actor
from tessera.core import TesseraDB
from tessera.db_base import fits_sqlite_int
from tessera.errors import NotFoundError, TesseraError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(exc: TesseraError) -> JSONResponse:
    """Render *exc* as the ``{"error": {message, code, details}}`` envelope and log it.

    A multi-rule ``ValidationError`` also lists each rule under ``details.errors``.
    """
    details = dict(exc.details)
    errors = getattr(exc, "errors", None)
    if errors and len(errors) > 1:
        details.setdefault("errors", list(errors))
    logger.warning("API error [%s] %s: %s", exc.status_code, exc.code, exc.message)
    return JSONResponse(
        {"error": {"message": exc.message, "code": exc.code, "details": details}},
        status_code=exc.status_code,
    )


async def _read_json_object(request: Request) -> dict[str, Any]:
    """Return the request body as a JSON object; anything else is a ValidationError."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, ValueError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _parse_path_id(value: str, entity: str) -> int:
    """Parse an ``{issue_id}``/``{tag_id}`` path segment.

    Non-integers are a ValidationError. Integers no row could carry (outside
    SQLite's 64-bit range) are a NotFoundError worded like the store's own.
    """
    try:
        result = int(value)
    except ValueError:
        raise ValidationError(f'Invalid {entity.lower()} id: "{value}". Must be an integer.') from None
    if not fits_sqlite_int(result):
        raise NotFoundError(f"{entity} not found: {value}")
    return result


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


async def get_db(request: Request) -> TesseraDB:
    """Return the store handle attached to the app by ``create_app()``."""
    db: TesseraDB = request.app.state.db
    return db


async def require_actor(request: Request) -> Actor:
    """Resolve the acting user or fail the request with 401."""
    actor = request.app.state.resolver.resolve(request.headers, request.cookies)
    if actor is None:
        raise UnauthorizedError("Authentication required")
    return actor
