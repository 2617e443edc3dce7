"""Tag route handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.requests import Request

from tessera.api_routes.common import _parse_path_id, _read_json_object, get_db, require_actor
from tessera.auth import Actor
from tessera.core import TesseraDB
from tessera.validation import parse_tag_create


def create_router() -> APIRouter:
    """Build the APIRouter for tag endpoints."""
    router = APIRouter()

    @router.get("/tags")
    async def api_list_tags(db: TesseraDB = Depends(get_db)) -> JSONResponse:
        return JSONResponse([t.to_dict() for t in db.list_tags()])

    @router.post("/tags")
    async def api_create_tag(
        request: Request,
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        body = await _read_json_object(request)
        tag = db.create_tag(parse_tag_create(body))
        return JSONResponse(tag.to_dict(), status_code=201)

    @router.delete("/tags/{tag_id}")
    async def api_delete_tag(
        tag_id: str,
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        """Refuses with 409 while any issue still carries the tag."""
        parsed_id = _parse_path_id(tag_id, "Tag")
        db.delete_tag(parsed_id)
        return JSONResponse({"message": "Tag deleted successfully"})

    return router
