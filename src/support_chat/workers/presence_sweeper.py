"""Presence sweeper: closes streams whose owner has gone quiet."""
from __future__ import annotations

import asyncio
import logging

from support_chat.infrastructure.realtime.registry import PresenceRegistry

logger = logging.getLogger(__name__)


class PresenceSweeper:
    """Background task calling ``registry.prune_stale`` every ``interval`` seconds."""

    def __init__(
        self,
        registry: PresenceRegistry,
        *,
        timeout: float,
        interval: float,
    ) -> None:
        self._registry = registry
        self._timeout = timeout
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="presence-sweeper")
        logger.info(
            "Presence sweeper started (timeout=%.0fs, interval=%.0fs)",
            self._timeout, self._interval,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Presence sweeper stopped")

    def sweep(self) -> int:
        pruned = self._registry.prune_stale(self._timeout)
        if pruned:
            logger.info("Pruned %d stale connections", len(pruned))
        return len(pruned)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Presence sweep failed")
