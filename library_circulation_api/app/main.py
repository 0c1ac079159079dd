"""
Main entrypoint for the Library Circulation API.

This module assembles the FastAPI application, sets up logging,
creates the SQLite store handle and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn library_circulation_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import Database
from .core.errors import CirculationError, ValidationError
from .core.logging_config import setup_logging


logger = logging.getLogger(__name__)


def describe_validation_errors(exc: RequestValidationError) -> str:
    """Turn FastAPI's error list into a single readable message."""
    parts = []
    for error in exc.errors():
        # ``loc`` starts with where the value came from: body, query, path.
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        message = error.get("msg", "invalid value")
        parts.append(f"Invalid value for {field}: {message}" if field else message)
    return "; ".join(parts) or "Invalid request"


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    database : Optional[Database]
        Store handle to serve.  Defaults to the SQLite file named by
        ``settings.database_url``.  Tests pass a handle to a temporary
        file.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.db = database or Database()

    app.include_router(v1_router, prefix="/api/v1")

    @app.exception_handler(CirculationError)
    async def circulation_error_handler(request: Request, exc: CirculationError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = ValidationError(describe_validation_errors(exc))
        logger.info("%s %s rejected: %s", request.method, request.url.path, error.message)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return "Library Management System is running!"

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and brings the schema up to date.
        app.state.db.init()
        logger.info("Using database %s", app.state.db.path)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
