from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from support_chat.domain.entities.message import Message
from support_chat.domain.value_objects.enums import EventType


def message_payload(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "conversationId": message.conversation_id,
        "senderId": message.sender_id,
        "content": message.content,
        "createdAt": message.created_at.isoformat(),
        "isRead": message.is_read,
        "clientMsgId": message.client_msg_id,
    }


@dataclass(frozen=True, slots=True)
class MessageCreated:
    message: Message

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": EventType.NEW_MESSAGE.value,
            "conversationId": self.message.conversation_id,
            "message": message_payload(self.message),
            # Lets the sender swap its optimistic placeholder for this row.
            "tempId": self.message.client_msg_id,
        }
