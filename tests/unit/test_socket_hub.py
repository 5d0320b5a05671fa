from __future__ import annotations

from support_chat.infrastructure.realtime.connection import ClientConnection
from support_chat.infrastructure.ws.manager import GlobalSocketHub


def test_publish_ignores_keys_and_reaches_everyone():
    hub = GlobalSocketHub()
    a = ClientConnection("a")
    b = ClientConnection("b")
    hub.connect(a)
    hub.connect(b)

    delivered = hub.publish(["conversation:whatever"], {"type": "receive_message", "data": "hi"})

    assert delivered == 2
    assert a.pending == 1
    assert b.pending == 1


def test_disconnect_removes_socket():
    hub = GlobalSocketHub()
    conn = ClientConnection("a")
    hub.connect(conn)
    hub.disconnect(conn)

    assert hub.size == 0
    assert hub.publish([], {"type": "receive_message"}) == 0
