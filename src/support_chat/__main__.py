"""Entrypoint: python -m support_chat"""
from __future__ import annotations

import uvicorn

from support_chat.api.middleware.correlation_id import configure_logging
from support_chat.config import settings


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "support_chat.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
