from __future__ import annotations

from datetime import datetime

from pydantic import Field

from support_chat.api.v1.schemas.common import CamelModel


class SendMessageRequest(CamelModel):
    content: str = Field(max_length=10_000)
    client_msg_id: str | None = Field(default=None, max_length=64)


class MessageResponse(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime
    is_read: bool
    client_msg_id: str | None = None
