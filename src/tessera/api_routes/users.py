"""User listing for assignee pickers."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tessera.api_routes.common import get_db, require_actor
from tessera.auth import Actor
from tessera.core import TesseraDB


def create_router() -> APIRouter:
    router = APIRouter()

    @router.get("/users")
    async def api_list_users(
        db: TesseraDB = Depends(get_db),
        actor: Actor = Depends(require_actor),
    ) -> JSONResponse:
        return JSONResponse([u.to_dict() for u in db.list_users()])

    return router
