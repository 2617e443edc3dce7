"""HTTP API for tessera.

``create_app()`` builds a FastAPI application around an explicitly passed
``TesseraDB``; the handle lives on ``app.state`` and is injected into
handlers via ``Depends(get_db)``. ``main()`` discovers the local
``.tessera/`` project and serves it with uvicorn.

Usage:
    tessera serve                     # http://127.0.0.1:3000
    tessera serve --port 9000         # Custom port
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from tessera.api_routes import issues as issue_routes
from tessera.api_routes import tags as tag_routes
from tessera.api_routes import users as user_routes
from tessera.api_routes.common import _error_response
from tessera.auth import ActorResolver, SessionResolver
from tessera.config import DB_FILENAME, AppConfig, find_tessera_root, read_config
from tessera.core import TesseraDB
from tessera.errors import TesseraError
from tessera.logging import request_extra, setup_logging

logger = logging.getLogger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log every request with its duration; turn stray exceptions into 500s."""

    def __init__(self, app: Any, *, expose_errors: bool = False) -> None:
        super().__init__(app)
        self.expose_errors = expose_errors

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        start = perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((perf_counter() - start) * 1000, 2)
            logger.error(
                "Unhandled error on %s %s",
                request.method,
                request.url.path,
                exc_info=True,
                extra=request_extra(request.method, request.url.path, 500, duration_ms, error=type(exc).__name__),
            )
            details = {"exception": str(exc)} if self.expose_errors else None
            return _error_response(TesseraError("Internal server error", details=details))
        duration_ms = round((perf_counter() - start) * 1000, 2)
        logger.info(
            "%s %s %d",
            request.method,
            request.url.path,
            response.status_code,
            extra=request_extra(request.method, request.url.path, response.status_code, duration_ms),
        )
        return response


def create_app(
    db: TesseraDB,
    *,
    resolver: ActorResolver | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application serving the issue and tag endpoints.

    *resolver* defaults to a ``SessionResolver`` over *db*; *config*
    supplies CORS origins and whether 500 responses expose exception text.
    """
    config = config or AppConfig()

    app = FastAPI(title="Tessera", docs_url=None, redoc_url=None)
    app.state.db = db
    app.state.resolver = resolver or SessionResolver(db)
    app.state.config = config

    async def _handle_tessera_error(request: Request, exc: TesseraError) -> JSONResponse:
        return _error_response(exc)

    app.add_exception_handler(TesseraError, _handle_tessera_error)  # type: ignore[arg-type]

    for module in (issue_routes, tag_routes, user_routes):
        app.include_router(module.create_router(), prefix="/api")

    app.add_middleware(RequestLogMiddleware, expose_errors=config.is_development)
    # Outermost, so 500s produced by the request logger also carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


def main(host: str | None = None, port: int | None = None) -> None:
    """Serve the local ``.tessera/`` project until interrupted."""
    import uvicorn

    tessera_dir = find_tessera_root()
    config = read_config(tessera_dir)
    setup_logging(tessera_dir)
    if host is not None:
        config.host = host
    if port is not None:
        config.port = port

    db = TesseraDB.from_project(tessera_dir.parent, check_same_thread=False)
    if db.db_path != tessera_dir / DB_FILENAME:
        logger.info("Using database override %s", db.db_path)
    app = create_app(db, config=config)

    print(f"Tessera API: http://{config.host}:{config.port}")
    try:
        uvicorn.run(app, host=config.host, port=config.port, log_level="warning")
    finally:
        db.close()
