from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from support_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from support_chat.api.v1.routers import (
    admin,
    chat,
    conversations,
    health,
    messages,
)
from support_chat.application.exceptions import (
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from support_chat.config import settings
from support_chat.infrastructure.db.session import engine
from support_chat.infrastructure.realtime.registry import PresenceRegistry
from support_chat.workers.presence_sweeper import PresenceSweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    sweeper = PresenceSweeper(
        app.state.registry,
        timeout=settings.PRESENCE_TIMEOUT_SECONDS,
        interval=settings.PRESENCE_SWEEP_SECONDS,
    )
    await sweeper.start()

    yield

    await sweeper.stop()
    app.state.registry.close_all()
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app(registry: PresenceRegistry | None = None) -> FastAPI:
    app = FastAPI(
        title="Support Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = registry or PresenceRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(admin.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"error": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def _bad_body(_req: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def _http(_req: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PersistenceError)
    async def _persistence(_req: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def _unhandled(req: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", req.method, req.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
