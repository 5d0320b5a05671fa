"""Server-sent event stream lifecycle for one client."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Iterable

from support_chat.domain.value_objects.enums import EventType
from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.realtime.registry import PresenceRegistry
from support_chat.infrastructure.realtime.serializer import encode_sse_frame

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

IsDisconnected = Callable[[], Awaitable[bool]]


@asynccontextmanager
async def open_connection(
    registry: PresenceRegistry,
    connection: ClientConnection,
    keys: Iterable[str],
) -> AsyncIterator[ClientConnection]:
    """Register ``connection`` under ``keys`` for the lifetime of the block.

    Every exit path, including cancellation when the client aborts, closes the
    handle and removes it from the registry exactly once.
    """
    for key in keys:
        registry.register(key, connection)
    try:
        yield connection
    finally:
        connection.close()
        registry.unregister(connection)
        connection.mark_closed()
        logger.info("Stream closed for user %s (%s)", connection.user_id, connection.id)


async def sse_frames(
    registry: PresenceRegistry,
    connection: ClientConnection,
    keys: Iterable[str],
    *,
    heartbeat: float,
    is_disconnected: IsDisconnected | None = None,
) -> AsyncIterator[str]:
    """Encode the connection's events as ``data: <json>`` frames until it closes."""
    async with open_connection(registry, connection, keys) as conn:
        yield encode_sse_frame({
            "type": EventType.CONNECTED.value,
            "connectionId": conn.id,
            "userId": conn.user_id,
        })
        async for event in conn.events(heartbeat):
            if event.get("type") == EventType.PING.value:
                if is_disconnected is not None and await is_disconnected():
                    logger.debug("Client went away: %r", conn)
                    return
            registry.touch(conn)
            yield encode_sse_frame(event)
