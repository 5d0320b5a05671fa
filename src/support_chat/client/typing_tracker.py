"""Remote typing indicators, expired on the client."""
from __future__ import annotations

import time
from typing import Callable


class TypingTracker:
    """Who is typing in a conversation.

    The server only relays start/stop signals, so an indicator whose stop
    never arrives is dropped after ``timeout`` seconds.
    """

    def __init__(self, timeout: float = 3.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._timeout = timeout
        self._clock = clock
        self._typing: dict[str, tuple[str | None, float]] = {}

    def apply_event(self, event: dict) -> None:
        if event.get("type") != "typing":
            return
        user_id = event.get("userId")
        if not user_id:
            return
        if event.get("isTyping"):
            self._typing[user_id] = (event.get("userName"), self._clock())
        else:
            self._typing.pop(user_id, None)

    def active(self) -> dict[str, str | None]:
        """User id to display name for everyone still typing."""
        cutoff = self._clock() - self._timeout
        self._typing = {
            uid: entry for uid, entry in self._typing.items() if entry[1] > cutoff
        }
        return {uid: name for uid, (name, _) in self._typing.items()}

    def is_typing(self, user_id: str) -> bool:
        return user_id in self.active()
