"""Keeps one event stream alive and reports its health."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable

from support_chat.client.sse import Event, EventSource

logger = logging.getLogger(__name__)

StateListener = Callable[["ConnectionSupervisor"], None]
EventHandler = Callable[[Event], Any]
Sleep = Callable[[float], Awaitable[None]]

GAVE_UP = "Connection failed. Please refresh the page."


class ConnectionSupervisor:
    """Reconnect loop with exponential backoff.

    Delays are ``base_delay * 2**n`` capped at ``max_delay``; after
    ``max_attempts`` consecutive failures the supervisor gives up. A stream
    that opens successfully resets the count.

    ``set_online`` mirrors the browser online/offline signal: it flips
    ``is_connected`` immediately, before any stream attempt has confirmed it,
    so the flag is a hint until the next attempt settles it.
    """

    def __init__(
        self,
        source: EventSource,
        on_event: EventHandler,
        *,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._source = source
        self._on_event = on_event
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleep = sleep
        self._listeners: list[StateListener] = []
        self._stopped = asyncio.Event()
        self._wake = asyncio.Event()

        self.is_connected = False
        self.transport: str | None = None
        self.error: str | None = None
        self.attempts = 0

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def backoff_delay(self, attempt: int) -> float:
        return min(self._base_delay * (2 ** attempt), self._max_delay)

    def set_online(self, online: bool) -> None:
        self._set_state(connected=online, error=None if online else "Offline")
        if online:
            self._wake.set()

    def stop(self) -> None:
        self._stopped.set()
        self._wake.set()

    async def run(self) -> None:
        """Consume the stream until stopped or out of attempts."""
        while not self._stopped.is_set():
            try:
                await self._consume_until_stopped()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.debug("Stream failed: %s", exc)
            if self._stopped.is_set():
                break
            if self.attempts >= self._max_attempts:
                self._set_state(connected=False, error=GAVE_UP)
                logger.warning("Giving up after %d reconnect attempts", self.attempts)
                return

            delay = self.backoff_delay(self.attempts)
            self.attempts += 1
            self._set_state(
                connected=False,
                error=(
                    f"Connection lost. Reconnecting in {delay:g}s... "
                    f"({self.attempts}/{self._max_attempts})"
                ),
            )
            await self._wait(delay)
        self._set_state(connected=False, error=self.error)

    async def _consume_until_stopped(self) -> None:
        """Run one stream attempt, abandoning it as soon as ``stop()`` is called."""
        consumer = asyncio.ensure_future(self._consume())
        stopper = asyncio.ensure_future(self._stopped.wait())
        try:
            await asyncio.wait({consumer, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not consumer.done():
                consumer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await consumer
        if not consumer.cancelled():
            consumer.result()

    async def _consume(self) -> None:
        async with self._source.open() as events:
            self.attempts = 0
            self.transport = self._source.transport
            self._set_state(connected=True, error=None)
            async for event in events:
                if self._stopped.is_set():
                    return
                result = self._on_event(event)
                if asyncio.iscoroutine(result):
                    await result

    async def _wait(self, delay: float) -> None:
        """Sleep out the backoff, cut short by ``stop()`` or coming back online."""
        self._wake.clear()
        sleeper = asyncio.ensure_future(self._sleep(delay))
        waker = asyncio.ensure_future(self._wake.wait())
        try:
            await asyncio.wait({sleeper, waker}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            waker.cancel()

    def _set_state(self, *, connected: bool, error: str | None) -> None:
        changed = connected != self.is_connected or error != self.error
        self.is_connected = connected
        self.error = error
        if changed:
            for listener in self._listeners:
                listener(self)
