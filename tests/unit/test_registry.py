from __future__ import annotations

from datetime import datetime, timezone

import pytest

from support_chat.application.ports.bus import ADMIN_AUDIENCE, conversation_key, user_key
from support_chat.domain.value_objects.enums import ConnectionState
from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.realtime.registry import PresenceRegistry
from tests.conftest import FakeClock


def drain(conn: ClientConnection) -> list[dict]:
    items = []
    while not conn._queue.empty():
        items.append(conn._queue.get_nowait())
    return items


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry(clock) -> PresenceRegistry:
    return PresenceRegistry(clock=clock)


def test_empty_registry_has_nobody_online(registry):
    assert registry.online_users() == []


def test_broadcast_reaches_only_subscribers_of_key(registry):
    a = ClientConnection("u1")
    b = ClientConnection("u2")
    registry.register(conversation_key("c1"), a)
    registry.register(conversation_key("c2"), b)

    delivered = registry.broadcast(conversation_key("c1"), {"type": "x"})

    assert delivered == 1
    assert drain(a) == [{"type": "x"}]
    assert drain(b) == []


def test_unregistered_connection_receives_nothing(registry):
    conn = ClientConnection("u1")
    registry.register(conversation_key("c1"), conn)
    registry.unregister(conn)

    assert registry.broadcast(conversation_key("c1"), {"type": "x"}) == 0
    assert drain(conn) == []
    assert registry.subscribers(conversation_key("c1")) == 0


def test_unregister_is_idempotent(registry):
    conn = ClientConnection("u1")
    registry.register(user_key("u1"), conn)
    registry.unregister(conn)
    registry.unregister(conn)
    assert registry.online_users() == []


def test_events_arrive_in_broadcast_order(registry):
    conns = [ClientConnection(f"u{i}") for i in range(3)]
    for conn in conns:
        registry.register(conversation_key("c1"), conn)

    for i in range(10):
        registry.broadcast(conversation_key("c1"), {"type": "new_message", "n": i})

    for conn in conns:
        assert [e["n"] for e in drain(conn)] == list(range(10))


def test_publish_dedupes_across_keys(registry):
    admin = ClientConnection("a1", is_admin=True)
    registry.register(ADMIN_AUDIENCE, admin)
    registry.register(conversation_key("c1"), admin)

    delivered = registry.publish([conversation_key("c1"), ADMIN_AUDIENCE], {"type": "x"})

    assert delivered == 1
    assert drain(admin) == [{"type": "x"}]


def test_exclusions(registry):
    me_phone = ClientConnection("me")
    me_laptop = ClientConnection("me")
    other = ClientConnection("other")
    for conn in (me_phone, me_laptop, other):
        registry.register(conversation_key("c1"), conn)

    assert registry.broadcast(conversation_key("c1"), {"n": 1}, exclude_user="me") == 1
    assert registry.broadcast(conversation_key("c1"), {"n": 2}, exclude_connection=me_phone.id) == 2

    assert drain(me_phone) == []
    assert drain(me_laptop) == [{"n": 2}]
    assert drain(other) == [{"n": 1}, {"n": 2}]


def test_dead_subscriber_is_dropped_without_failing_others():
    registry = PresenceRegistry()
    slow = ClientConnection("slow", max_queue=1)
    healthy = ClientConnection("healthy")
    registry.register(conversation_key("c1"), slow)
    registry.register(conversation_key("c1"), healthy)

    registry.broadcast(conversation_key("c1"), {"n": 1})
    delivered = registry.broadcast(conversation_key("c1"), {"n": 2})

    assert delivered == 1
    assert [e["n"] for e in drain(healthy)] == [1, 2]
    assert slow.state is ConnectionState.CLOSING
    assert registry.subscribers(conversation_key("c1")) == 1
    assert "slow" not in registry.online_users()


def test_closed_connection_is_skipped(registry):
    conn = ClientConnection("u1")
    registry.register(conversation_key("c1"), conn)
    conn.close()
    drain(conn)

    assert registry.broadcast(conversation_key("c1"), {"type": "x"}) == 0


def test_presence_counts_connections_per_user(registry):
    first = ClientConnection("u1")
    second = ClientConnection("u1")
    registry.register(user_key("u1"), first)
    registry.register(user_key("u1"), second)

    assert registry.online_users() == ["u1"]
    assert registry.presence("u1").connections == 2

    registry.unregister(first)
    assert registry.online_users() == ["u1"]
    registry.unregister(second)
    assert registry.online_users() == []
    assert registry.presence("u1") is None


def test_presence_announced_to_admins_on_first_and_last_connection(registry):
    admin = ClientConnection("a1", is_admin=True)
    registry.register(ADMIN_AUDIENCE, admin)
    drain(admin)

    tab1 = ClientConnection("u1")
    tab2 = ClientConnection("u1")
    registry.register(user_key("u1"), tab1)
    registry.register(user_key("u1"), tab2)
    registry.unregister(tab1)
    registry.unregister(tab2)

    events = drain(admin)
    assert [(e["type"], e["userId"], e["online"]) for e in events] == [
        ("presence", "u1", True),
        ("presence", "u1", False),
    ]


def test_prune_stale_closes_quiet_users(registry, clock):
    quiet = ClientConnection("quiet")
    active = ClientConnection("active")
    registry.register(user_key("quiet"), quiet)
    registry.register(user_key("active"), active)

    clock.advance(60)
    registry.touch(active)
    clock.advance(60)

    pruned = registry.prune_stale(90)

    assert pruned == [quiet]
    assert quiet.state is ConnectionState.CLOSING
    assert registry.online_users() == ["active"]


def test_close_all(registry):
    conns = [ClientConnection(f"u{i}") for i in range(3)]
    for conn in conns:
        registry.register(user_key(conn.user_id), conn)

    assert registry.close_all() == 3
    assert registry.online_users() == []
    assert all(not c.is_open for c in conns)
