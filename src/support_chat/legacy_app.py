"""Entrypoint for the legacy socket server: python -m support_chat.legacy_app"""
from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from support_chat.api.middleware.correlation_id import configure_logging
from support_chat.api.v1.routers import ws
from support_chat.config import settings


def create_legacy_app() -> FastAPI:
    app = FastAPI(title="Support Chat Legacy Socket", version="0.1.0")
    app.include_router(ws.router)
    return app


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "support_chat.legacy_app:create_legacy_app",
        factory=True,
        host=settings.LEGACY_SOCKET_HOST,
        port=settings.LEGACY_SOCKET_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
