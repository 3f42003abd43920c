"""FastAPI application entrypoint."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .api import editor, plays, roles
from .api.deps import get_editor_registry, get_gateway
from .config import get_settings
from .domain.errors import (
    ApplicationError,
    NotFoundError,
    OwnerTokenUnavailableError,
    SaveError,
    TransportError,
    ValidationError,
)
from .observability.log_config import configure_logging
from .observability.otel import configure_telemetry
from .persistence.db import dispose_engine, init_db

logger = structlog.get_logger(__name__)


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.observability.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # pragma: no cover - FastAPI lifecycle
        # missing GraphQL configuration is fatal here
        app.dependency_overrides.get(get_gateway, get_gateway)()
        if settings.local_state.enabled:
            await init_db()
        yield
        get_editor_registry().close_all()
        await dispose_engine()

    app = FastAPI(
        title="ProcessCoach",
        version="0.1.0",
        openapi_version="3.1.0",
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    configure_telemetry()

    @app.exception_handler(ValidationError)
    async def _validation_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, type(exc).__name__, str(exc))

    @app.exception_handler(NotFoundError)
    async def _not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "NotFound", str(exc))

    @app.exception_handler(OwnerTokenUnavailableError)
    async def _owner_handler(request: Request, exc: OwnerTokenUnavailableError):
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "OwnerTokenUnavailable", str(exc))

    @app.exception_handler(SaveError)
    async def _save_handler(request: Request, exc: SaveError):
        return _error(status.HTTP_502_BAD_GATEWAY, "SaveFailed", "Failed to save. Please try again.")

    @app.exception_handler(TransportError)
    @app.exception_handler(ApplicationError)
    async def _upstream_handler(request: Request, exc: Exception):
        logger.error("upstream.failed", path=request.url.path, error=str(exc))
        return _error(status.HTTP_502_BAD_GATEWAY, type(exc).__name__, "Something went wrong. Please try again.")

    app.include_router(plays.router)
    app.include_router(roles.router)
    app.include_router(editor.router)

    @app.get("/healthz")
    async def healthcheck():
        return {"status": "ok", "environment": settings.environment}

    return app


app = create_app()


__all__ = ["app", "create_app"]
