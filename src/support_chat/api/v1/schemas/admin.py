from __future__ import annotations

from support_chat.api.v1.schemas.common import CamelModel


class StatsResponse(CamelModel):
    total_conversations: int
    unread_conversations: int
    today_messages: int
