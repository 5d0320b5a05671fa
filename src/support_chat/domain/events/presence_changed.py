from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from support_chat.domain.value_objects.enums import EventType


@dataclass(frozen=True, slots=True)
class PresenceChanged:
    user_id: str
    online: bool
    at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": EventType.PRESENCE.value,
            "userId": self.user_id,
            "online": self.online,
            "at": self.at.isoformat(),
        }
