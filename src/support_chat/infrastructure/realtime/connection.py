"""Per-client outbound connection handle."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, AsyncIterator

from support_chat.application.exceptions import TransportError
from support_chat.domain.value_objects.enums import ConnectionState, EventType

logger = logging.getLogger(__name__)

_CLOSE = object()


class ClientConnection:
    """One live subscriber: a bounded FIFO queue drained by its transport.

    State moves OPEN → CLOSING → CLOSED and never back; a reconnecting client
    gets a new handle.
    """

    def __init__(
        self,
        user_id: str,
        *,
        is_admin: bool = False,
        max_queue: int = 256,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.user_id = user_id
        self.is_admin = is_admin
        self.keys: set[str] = set()
        self._state = ConnectionState.OPEN
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_queue)

    def __repr__(self) -> str:
        return f"<ClientConnection {self.id} user={self.user_id} {self._state}>"

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def send(self, event: dict[str, Any]) -> None:
        """Enqueue an event. No-op once closing; raises TransportError when backed up."""
        if self._state is not ConnectionState.OPEN:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull as exc:
            raise TransportError(f"connection {self.id} is not draining") from exc

    def close(self) -> bool:
        """Start closing. Returns False if already closing or closed."""
        if self._state is not ConnectionState.OPEN:
            return False
        self._state = ConnectionState.CLOSING
        # Wake the reader; undelivered events are dropped if the queue is full.
        while True:
            try:
                self._queue.put_nowait(_CLOSE)
                break
            except asyncio.QueueFull:
                self._queue.get_nowait()
        return True

    def mark_closed(self) -> None:
        self._state = ConnectionState.CLOSED

    async def events(self, heartbeat: float) -> AsyncIterator[dict[str, Any]]:
        """Yield queued events in order, and a ping after ``heartbeat`` idle seconds.

        Events queued before ``close()`` are still yielded; the iterator ends
        at the close marker.
        """
        while self._state is not ConnectionState.CLOSED:
            try:
                async with asyncio.timeout(heartbeat):
                    item = await self._queue.get()
            except TimeoutError:
                if self._state is not ConnectionState.OPEN:
                    return
                yield {"type": EventType.PING.value}
                continue
            if item is _CLOSE:
                return
            yield item
