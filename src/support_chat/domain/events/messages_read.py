from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from support_chat.domain.value_objects.enums import EventType


@dataclass(frozen=True, slots=True)
class MessagesRead:
    conversation_id: str
    reader_id: str
    updated: int
    read_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": EventType.READ_RECEIPT.value,
            "conversationId": self.conversation_id,
            "readerId": self.reader_id,
            "updated": self.updated,
            "readAt": self.read_at.isoformat(),
        }
