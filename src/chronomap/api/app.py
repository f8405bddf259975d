"""
FastAPI Application Factory & Configuration.

This module initializes the FastAPI application instance. It is responsible for:
1.  **Middleware Setup**: CORS for browser front-ends drawing the map.
2.  **Exception Handling**: Generator failures and bad input become structured JSON.
3.  **Routing**: Mounting the snapshot router and the health probe.
4.  **Lifecycle**: Closing the service (and its controller) on shutdown.

Design Pattern
--------------
An **Application Factory** (`create_app`) so tests can pass an in-memory
`ChronoMapService` instead of the settings-driven one.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chronomap import __version__
from chronomap.api.routers import snapshots
from chronomap.core.errors import GeneratorError, GeneratorUnavailable
from chronomap.core.settings import get_logger, load_settings
from chronomap.service import ChronoMapService

logger = get_logger("chronomap.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup; close the service on shutdown."""
    logger.info("ChronoMap API starting (env=%s)", load_settings().environment)
    yield
    service: ChronoMapService | None = getattr(app.state, "service", None)
    if service is not None:
        service.close()
    logger.info("ChronoMap API shut down")


def create_app(service: ChronoMapService | None = None) -> FastAPI:
    """
    Construct and configure the ChronoMap FastAPI application.

    Parameters
    ----------
    service:
        Optional pre-built service. When omitted, one is built from settings
        on the first request.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    app = FastAPI(
        title="ChronoMap API",
        description="World history snapshots, projected map scenes and relationship graphs.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.service = service

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(GeneratorError)
    async def generator_error_handler(request: Request, exc: GeneratorError) -> JSONResponse:
        """Unavailable -> 503; malformed or transport -> 502."""
        status_code = 503 if isinstance(exc, GeneratorUnavailable) else 502
        logger.warning("%s %s -> %s (%s)", request.method, request.url.path, status_code, exc.reason.value)
        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.reason.value,
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request",
                "detail": str(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all so unhandled exceptions still return structured JSON."""
        logger.exception("unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(snapshots.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
