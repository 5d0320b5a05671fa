from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConversationStats:
    total_conversations: int
    unread_conversations: int
    today_messages: int
