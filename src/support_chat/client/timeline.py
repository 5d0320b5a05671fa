"""Client-side message list with optimistic sends."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    is_read: bool = False
    is_optimistic: bool = False
    local_id: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> ChatMessage:
        return cls(
            id=data["id"],
            conversation_id=data["conversationId"],
            sender_id=data["senderId"],
            content=data["content"],
            created_at=datetime.fromisoformat(data["createdAt"]),
            is_read=bool(data.get("isRead", False)),
            local_id=data.get("clientMsgId"),
        )


class MessageTimeline:
    """Ordered messages of one conversation.

    A pending message is rendered immediately under a local id and replaced
    in place once the server confirms it, so it keeps its position.
    """

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        self._items: list[ChatMessage] = []

    def __len__(self) -> int:
        return len(self._items)

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._items)

    def add_pending(self, sender_id: str, content: str) -> ChatMessage:
        local_id = f"temp_{uuid.uuid4().hex}"
        msg = ChatMessage(
            id=local_id,
            conversation_id=self.conversation_id,
            sender_id=sender_id,
            content=content.strip(),
            created_at=datetime.now(timezone.utc),
            is_optimistic=True,
            local_id=local_id,
        )
        self._items.append(msg)
        return msg

    def confirm(self, local_id: str | None, confirmed: ChatMessage) -> ChatMessage:
        """Swap the pending entry for the server's row, in place.

        A row already present (say, delivered by the stream before the HTTP
        response) wins and the pending copy is dropped. With no pending match
        the row is appended.
        """
        confirmed = replace(confirmed, is_optimistic=False)
        pending = self._pending_index(local_id)
        for existing in self._items:
            if existing.id == confirmed.id and not existing.is_optimistic:
                if pending is not None:
                    del self._items[pending]
                return existing
        if pending is not None:
            self._items[pending] = confirmed
        else:
            self._items.append(confirmed)
        return confirmed

    def discard(self, local_id: str) -> bool:
        """Drop a pending message whose send failed."""
        pending = self._pending_index(local_id)
        if pending is None:
            return False
        del self._items[pending]
        return True

    def mark_read_by(self, reader_id: str) -> int:
        changed = 0
        for i, existing in enumerate(self._items):
            if existing.sender_id != reader_id and not existing.is_read:
                self._items[i] = replace(existing, is_read=True)
                changed += 1
        return changed

    def apply_event(self, event: dict[str, Any]) -> bool:
        """Fold a stream event into the timeline. Returns True if it changed."""
        if event.get("conversationId") != self.conversation_id:
            return False
        kind = event.get("type")
        if kind == "new_message":
            payload = event.get("message")
            if not payload:
                return False
            msg = ChatMessage.from_payload(payload)
            local_id = event.get("tempId") or msg.local_id
            if self._pending_index(local_id) is None and any(m.id == msg.id for m in self._items):
                return False
            self.confirm(local_id, msg)
            return True
        if kind == "read_receipt":
            reader_id = event.get("readerId")
            return bool(reader_id) and self.mark_read_by(reader_id) > 0
        return False

    def _pending_index(self, local_id: str | None) -> int | None:
        if not local_id:
            return None
        for i, existing in enumerate(self._items):
            if existing.is_optimistic and existing.local_id == local_id:
                return i
        return None
