from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from support_chat.domain.value_objects.enums import EventType


@dataclass(frozen=True, slots=True)
class TypingChanged:
    conversation_id: str
    user_id: str
    is_typing: bool
    user_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": EventType.TYPING.value,
            "conversationId": self.conversation_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "isTyping": self.is_typing,
        }
