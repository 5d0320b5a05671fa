from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import pytest

from support_chat.client.supervisor import GAVE_UP, ConnectionSupervisor


class ScriptedSource:
    """Each open() consumes one script step: an exception to raise or events to stream."""

    transport = "sse"

    def __init__(self, *steps):
        self.steps = list(steps)
        self.opens = 0

    @asynccontextmanager
    async def open(self):
        self.opens += 1
        step = self.steps.pop(0) if self.steps else ConnectionError("down")
        if isinstance(step, Exception):
            raise step

        async def events():
            for event in step:
                yield event

        yield events()


class IdleSource:
    """Opens fine, then never delivers anything."""

    transport = "sse"

    def __init__(self):
        self.closed = False

    @asynccontextmanager
    async def open(self):
        async def events():
            await asyncio.sleep(3600)
            yield {"type": "ping"}

        try:
            yield events()
        finally:
            self.closed = True


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_backoff_doubles_then_gives_up():
    sleep = RecordingSleep()
    source = ScriptedSource()
    supervisor = ConnectionSupervisor(source, lambda e: None, sleep=sleep)

    await supervisor.run()

    assert sleep.delays == [1, 2, 4, 8, 16]
    assert source.opens == 6
    assert supervisor.is_connected is False
    assert supervisor.error == GAVE_UP


@pytest.mark.asyncio
async def test_backoff_is_capped():
    sleep = RecordingSleep()
    supervisor = ConnectionSupervisor(ScriptedSource(), lambda e: None, max_attempts=8, sleep=sleep)

    await supervisor.run()

    assert sleep.delays == [1, 2, 4, 8, 16, 30, 30, 30]


@pytest.mark.asyncio
async def test_successful_open_resets_attempts():
    sleep = RecordingSleep()
    received = []
    source = ScriptedSource(
        ConnectionError("a"),
        ConnectionError("b"),
        [{"type": "connected"}, {"type": "new_message"}],
    )
    supervisor = ConnectionSupervisor(source, received.append, sleep=sleep)

    await supervisor.run()

    assert received == [{"type": "connected"}, {"type": "new_message"}]
    assert sleep.delays == [1, 2, 1, 2, 4, 8, 16]
    assert supervisor.transport == "sse"


@pytest.mark.asyncio
async def test_state_reported_to_listeners():
    seen = []
    supervisor = None

    def on_event(event):
        seen.append(("event", supervisor.is_connected, supervisor.error))
        supervisor.stop()

    supervisor = ConnectionSupervisor(
        ScriptedSource([{"type": "connected"}]), on_event, sleep=RecordingSleep(),
    )
    supervisor.add_listener(lambda s: seen.append(("state", s.is_connected, s.error)))

    await supervisor.run()

    assert seen[0] == ("state", True, None)
    assert seen[1] == ("event", True, None)
    assert seen[-1] == ("state", False, None)


@pytest.mark.asyncio
async def test_async_event_handler_is_awaited():
    received = []

    async def handler(event):
        received.append(event)

    supervisor = ConnectionSupervisor(
        ScriptedSource([{"n": 1}, {"n": 2}]), handler, max_attempts=0, sleep=RecordingSleep(),
    )
    await supervisor.run()

    assert received == [{"n": 1}, {"n": 2}]


def test_online_signal_is_applied_optimistically():
    supervisor = ConnectionSupervisor(ScriptedSource(), lambda e: None)

    supervisor.set_online(True)
    assert supervisor.is_connected is True
    assert supervisor.error is None

    supervisor.set_online(False)
    assert supervisor.is_connected is False
    assert supervisor.error == "Offline"


@pytest.mark.asyncio
async def test_optimistic_online_is_corrected_by_next_attempt():
    supervisor = ConnectionSupervisor(ScriptedSource(), lambda e: None, max_attempts=1, sleep=RecordingSleep())
    supervisor.set_online(True)

    await supervisor.run()

    assert supervisor.is_connected is False


def test_backoff_delay_formula():
    supervisor = ConnectionSupervisor(ScriptedSource(), lambda e: None, base_delay=0.5, max_delay=5)
    assert [supervisor.backoff_delay(n) for n in range(6)] == [0.5, 1, 2, 4, 5, 5]


@pytest.mark.asyncio
async def test_stop_releases_idle_stream():
    source = IdleSource()
    supervisor = ConnectionSupervisor(source, lambda e: None, sleep=RecordingSleep())
    task = asyncio.create_task(supervisor.run())
    while not supervisor.is_connected:
        await asyncio.sleep(0)

    supervisor.stop()
    await asyncio.wait_for(task, timeout=1.0)

    assert source.closed is True
    assert supervisor.is_connected is False
    assert supervisor.attempts == 0
