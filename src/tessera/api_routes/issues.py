"""Issue route handlers: list, read, create, update, delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.requests import Request

from tessera.api_routes.common import _parse_path_id, _read_json_object, get_db, require_actor
from tessera.auth import Actor
from tessera.core import TesseraDB
from tessera.validation import parse_issue_create, parse_issue_filter, parse_issue_patch, parse_page_request

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------


def create_router() -> APIRouter:
    """Build the APIRouter for issue endpoints.

    NOTE: All handlers are intentionally async despite doing synchronous
    SQLite I/O. This serializes DB access on the event loop thread,
    avoiding concurrent multi-thread access to the shared DB connection.
    """
    router = APIRouter()

    @router.get("/issues")
    async def api_list_issues(request: Request, db: TesseraDB = Depends(get_db)) -> JSONResponse:
        """Filtered, paginated listing, newest first."""
        params = request.query_params
        filters = parse_issue_filter(params)
        page = parse_page_request(params)
        result = db.list_issues(filters, page)
        return JSONResponse(result.to_dict())

    @router.get("/issues/{issue_id}")
    async def api_get_issue(issue_id: str, db: TesseraDB = Depends(get_db)) -> JSONResponse:
        parsed_id = _parse_path_id(issue_id, "Issue")
        return JSONResponse(db.get_issue(parsed_id).to_dict())

    @router.post("/issues")
    async def api_create_issue(
        request: Request,
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        body = await _read_json_object(request)
        payload = parse_issue_create(body)
        issue = db.create_issue(payload, actor_id=actor.id)
        return JSONResponse(issue.to_dict(), status_code=201)

    @router.put("/issues/{issue_id}")
    async def api_update_issue(
        issue_id: str,
        request: Request,
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        """Partial update; only keys present in the body change."""
        parsed_id = _parse_path_id(issue_id, "Issue")
        body = await _read_json_object(request)
        patch = parse_issue_patch(body)
        issue = db.update_issue(parsed_id, patch)
        logger.info("Issue %d updated by %s", parsed_id, actor.id)
        return JSONResponse(issue.to_dict())

    @router.delete("/issues/{issue_id}")
    async def api_delete_issue(
        issue_id: str,
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        parsed_id = _parse_path_id(issue_id, "Issue")
        db.delete_issue(parsed_id)
        return JSONResponse({"message": "Issue deleted successfully"})

    return router
