from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from support_chat.domain.value_objects.enums import ParticipantRole


@dataclass(frozen=True, slots=True)
class Conversation:
    """A support thread between exactly one customer and one admin."""

    id: str
    customer_id: str
    admin_id: str
    last_message_id: str | None
    customer_unread_count: int
    admin_unread_count: int
    created_at: datetime
    updated_at: datetime

    def role_of(self, user_id: str) -> ParticipantRole | None:
        if user_id == self.customer_id:
            return ParticipantRole.CUSTOMER
        if user_id == self.admin_id:
            return ParticipantRole.ADMIN
        return None

    def is_participant(self, user_id: str) -> bool:
        return self.role_of(user_id) is not None

    def unread_for(self, user_id: str) -> int:
        role = self.role_of(user_id)
        if role is ParticipantRole.CUSTOMER:
            return self.customer_unread_count
        if role is ParticipantRole.ADMIN:
            return self.admin_unread_count
        return 0
