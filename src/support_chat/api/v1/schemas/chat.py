from __future__ import annotations

from support_chat.api.v1.schemas.common import CamelModel


class TypingRequest(CamelModel):
    conversation_id: str | None = None
    user_id: str | None = None
    is_typing: bool = False
    user_name: str | None = None
    connection_id: str | None = None


class MarkReadRequest(CamelModel):
    conversation_id: str | None = None
    user_id: str | None = None


class OnlineUsersResponse(CamelModel):
    online_users: list[str]
