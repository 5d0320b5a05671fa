from __future__ import annotations

from datetime import datetime

from support_chat.api.v1.schemas.common import CamelModel
from support_chat.api.v1.schemas.message import MessageResponse
from support_chat.application.dto.conversation import ConversationSummary


class OpenConversationRequest(CamelModel):
    participant_id: str | None = None


class ConversationResponse(CamelModel):
    id: str
    customer_id: str
    admin_id: str
    last_message_id: str | None
    customer_unread_count: int
    admin_unread_count: int
    created_at: datetime
    updated_at: datetime


class ConversationSummaryResponse(ConversationResponse):
    last_message: MessageResponse | None = None
    unread_count: int = 0

    @classmethod
    def from_summary(cls, summary: ConversationSummary) -> ConversationSummaryResponse:
        conv = ConversationResponse.model_validate(summary.conversation)
        return cls(
            **conv.model_dump(),
            last_message=(
                MessageResponse.model_validate(summary.last_message)
                if summary.last_message else None
            ),
            unread_count=summary.unread_count,
        )
