"""Event-stream client transport on httpx."""
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterable, AsyncIterator, Protocol

import httpx

logger = logging.getLogger(__name__)

Event = dict[str, Any]


class EventSource(Protocol):
    """Anything that can open one event stream.

    Entering ``open()`` means the server accepted the stream; iterating the
    yielded iterator produces decoded events until the stream ends or fails.
    """

    transport: str

    def open(self) -> Any: ...


async def parse_sse_lines(lines: AsyncIterable[str]) -> AsyncIterator[Event]:
    """Decode ``data:`` frames. Multi-line data is joined; comments and unknown fields are ignored."""
    data: list[str] = []
    async for line in lines:
        if line == "":
            if data:
                payload = "\n".join(data)
                data = []
                try:
                    yield json.loads(payload)
                except json.JSONDecodeError:
                    logger.warning("Skipping malformed event frame: %r", payload[:200])
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field == "data":
            data.append(value[1:] if value.startswith(" ") else value)


class SseEventSource:
    transport = "sse"

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: dict[str, str] | None = None,
    ) -> None:
        self._client = client
        self._url = url
        self._params = params or {}

    @asynccontextmanager
    async def open(self) -> AsyncIterator[AsyncIterator[Event]]:
        async with self._client.stream(
            "GET",
            self._url,
            params=self._params,
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(10.0, read=None),
        ) as response:
            response.raise_for_status()
            yield parse_sse_lines(response.aiter_lines())
