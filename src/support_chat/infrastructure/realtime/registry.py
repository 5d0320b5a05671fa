"""Process-wide presence and fan-out registry."""
from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Any, Iterable

from support_chat.application.exceptions import TransportError
from support_chat.application.ports.bus import ADMIN_AUDIENCE
from support_chat.application.ports.clock import Clock, SystemClock
from support_chat.domain.entities.presence import PresenceEntry
from support_chat.domain.events.presence_changed import PresenceChanged
from support_chat.infrastructure.realtime.connection import ClientConnection

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Tracks live connections per key and who is online.

    Delivery is in-process and best-effort: no persistence of missed events,
    no retry, no cross-process fan-out. Implements ``EventPublisher``.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._lock = threading.RLock()
        self._by_key: dict[str, set[ClientConnection]] = {}
        self._connections: dict[str, ClientConnection] = {}
        self._presence: dict[str, PresenceEntry] = {}

    def register(self, key: str, connection: ClientConnection) -> None:
        came_online = False
        with self._lock:
            self._by_key.setdefault(key, set()).add(connection)
            connection.keys.add(key)
            if connection.id not in self._connections:
                self._connections[connection.id] = connection
                came_online = self._track(connection)
        logger.debug("Registered %r under %s", connection, key)
        if came_online:
            self._announce(connection.user_id, online=True)

    def unregister(self, connection: ClientConnection) -> None:
        went_offline = False
        with self._lock:
            if self._connections.pop(connection.id, None) is None:
                return
            for key in connection.keys:
                members = self._by_key.get(key)
                if members is None:
                    continue
                members.discard(connection)
                if not members:
                    del self._by_key[key]
            went_offline = self._untrack(connection)
        logger.debug("Unregistered %r", connection)
        if went_offline:
            self._announce(connection.user_id, online=False)

    def broadcast(
        self,
        key: str,
        event: dict[str, Any],
        *,
        exclude_connection: str | None = None,
        exclude_user: str | None = None,
    ) -> int:
        return self.publish(
            [key], event,
            exclude_connection=exclude_connection,
            exclude_user=exclude_user,
        )

    def publish(
        self,
        keys: Iterable[str],
        event: dict[str, Any],
        *,
        exclude_connection: str | None = None,
        exclude_user: str | None = None,
    ) -> int:
        """Deliver to every open connection under any of ``keys``, once each."""
        with self._lock:
            targets: dict[str, ClientConnection] = {}
            for key in keys:
                for conn in self._by_key.get(key, ()):
                    targets[conn.id] = conn

        delivered = 0
        dead: list[ClientConnection] = []
        for conn in targets.values():
            if conn.id == exclude_connection or conn.user_id == exclude_user:
                continue
            if not conn.is_open:
                continue
            try:
                conn.send(event)
                delivered += 1
            except TransportError:
                dead.append(conn)
        for conn in dead:
            logger.warning("Dropping subscriber %r: write failed", conn)
            conn.close()
            self.unregister(conn)
        return delivered

    def online_users(self) -> list[str]:
        with self._lock:
            return sorted(self._presence)

    def presence(self, user_id: str) -> PresenceEntry | None:
        with self._lock:
            entry = self._presence.get(user_id)
            return None if entry is None else PresenceEntry(
                user_id=entry.user_id,
                connections=entry.connections,
                connected_at=entry.connected_at,
                last_seen=entry.last_seen,
            )

    def touch(self, connection: ClientConnection) -> None:
        with self._lock:
            entry = self._presence.get(connection.user_id)
            if entry is not None:
                entry.last_seen = self._clock.now()

    def subscribers(self, key: str) -> int:
        with self._lock:
            return len(self._by_key.get(key, ()))

    def prune_stale(self, timeout: float) -> list[ClientConnection]:
        """Close connections of users not seen for ``timeout`` seconds."""
        cutoff = self._clock.now() - timedelta(seconds=timeout)
        with self._lock:
            stale_users = {
                user_id for user_id, entry in self._presence.items()
                if entry.last_seen < cutoff
            }
            stale = [c for c in self._connections.values() if c.user_id in stale_users]
        for conn in stale:
            logger.info("Presence timeout for %r", conn)
            conn.close()
            self.unregister(conn)
        return stale

    def close_all(self) -> int:
        with self._lock:
            connections = list(self._connections.values())
        for conn in connections:
            conn.close()
            self.unregister(conn)
        if connections:
            logger.info("Closed %d live connections", len(connections))
        return len(connections)

    def _track(self, connection: ClientConnection) -> bool:
        now = self._clock.now()
        entry = self._presence.get(connection.user_id)
        if entry is None:
            self._presence[connection.user_id] = PresenceEntry(
                user_id=connection.user_id,
                connections=1,
                connected_at=now,
                last_seen=now,
            )
            return True
        entry.connections += 1
        entry.last_seen = now
        return False

    def _untrack(self, connection: ClientConnection) -> bool:
        entry = self._presence.get(connection.user_id)
        if entry is None:
            return False
        entry.connections -= 1
        if entry.connections > 0:
            return False
        del self._presence[connection.user_id]
        return True

    def _announce(self, user_id: str, *, online: bool) -> None:
        logger.info("User %s is %s", user_id, "online" if online else "offline")
        event = PresenceChanged(user_id=user_id, online=online, at=self._clock.now())
        self.publish([ADMIN_AUDIENCE], event.to_payload(), exclude_user=user_id)
