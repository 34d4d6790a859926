"""
Main entrypoint for the Library API.

This module assembles the FastAPI application: logging, middleware,
exception handlers and the REST routers.  ``create_app`` builds and
configures the app, which is instantiated at import time as ``app`` so
it can be served directly, e.g.::

    uvicorn library_api.app.main:app --reload

Each application owns its own ``ServiceContainer`` (kept on
``app.state.services``), so tests get an isolated in-memory store by
calling ``create_app`` again.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.deps import first_error_message
from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.exceptions import LibraryError
from .core.logging_config import setup_logging
from .services.container import ServiceContainer

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("library_api.access")


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """Render every error as JSON with at least a ``message`` key."""

    @app.exception_handler(LibraryError)
    async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Raised by the router itself when no route matches.
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": "Route not found", "path": request.url.path},
            )
        content = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": first_error_message(list(exc.errors()))},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message": "Internal server error",
                "error": str(exc) if config.is_development else "Something went wrong",
            },
        )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    config : Optional[Settings]
        Settings to use instead of the module-level ``settings``.

    Returns
    -------
    FastAPI
        A configured application with a fresh, empty in-memory store.
    """
    config = config or default_settings
    # Initialise logging before anything else so that the services can
    # log from the first request on.
    setup_logging(config)

    app = FastAPI(title=config.project_name, version=config.api_version, debug=config.debug)
    app.state.settings = config
    app.state.services = ServiceContainer.build(config)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    register_exception_handlers(app, config)

    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        """Liveness probe with the process uptime in seconds."""
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
        }

    logger.info("%s %s ready (%s)", config.project_name, config.api_version, config.environment)
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
