"""
Main entrypoint for the Skill Swap API.

This module assembles the FastAPI application, sets up logging, maps
service refusals onto HTTP responses and includes the versioned
routers.  ``create_app`` builds the app, which is then instantiated at
module import time as ``app`` so it can be served with::

    uvicorn skill_swap_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import ServiceError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured application with the v1 routes mounted under
        ``/api/v1``.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.include_router(v1_router, prefix="/api/v1")

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file on first start and applies any
        # pending migrations.
        init_db()

    return app


app = create_app()
