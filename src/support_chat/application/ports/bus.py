from __future__ import annotations

from typing import Any, Iterable, Protocol

ADMIN_AUDIENCE = "admins"


def conversation_key(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


class EventPublisher(Protocol):
    """Fan-out side of a broadcast channel.

    Implementations must not block: publish only enqueues, so callers can
    publish right after a commit without yielding to other tasks.
    """

    def publish(
        self,
        keys: Iterable[str],
        event: dict[str, Any],
        *,
        exclude_connection: str | None = None,
        exclude_user: str | None = None,
    ) -> int: ...
