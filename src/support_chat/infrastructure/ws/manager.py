"""Legacy global socket hub.

Same publish interface as the SSE registry, but with no scoping: every
publish reaches every connected socket whatever keys it names.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.realtime.registry import PresenceRegistry

logger = logging.getLogger(__name__)

GLOBAL_KEY = "*"


class GlobalSocketHub:
    def __init__(self, registry: PresenceRegistry | None = None) -> None:
        self._registry = registry or PresenceRegistry()

    @property
    def registry(self) -> PresenceRegistry:
        return self._registry

    def connect(self, connection: ClientConnection) -> None:
        self._registry.register(GLOBAL_KEY, connection)
        logger.debug("Socket connected: %r (total=%d)", connection, self.size)

    def disconnect(self, connection: ClientConnection) -> None:
        connection.close()
        self._registry.unregister(connection)
        connection.mark_closed()
        logger.debug("Socket disconnected: %r", connection)

    def publish(
        self,
        keys: Iterable[str],
        event: dict[str, Any],
        *,
        exclude_connection: str | None = None,
        exclude_user: str | None = None,
    ) -> int:
        return self._registry.broadcast(
            GLOBAL_KEY, event,
            exclude_connection=exclude_connection,
            exclude_user=exclude_user,
        )

    @property
    def size(self) -> int:
        return self._registry.subscribers(GLOBAL_KEY)
