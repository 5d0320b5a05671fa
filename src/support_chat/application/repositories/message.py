from __future__ import annotations

from typing import Protocol

from support_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(
        self,
        conversation_id: str,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]: ...

    async def count_for_conversation(self, conversation_id: str) -> int: ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_msg_id → return existing."""
        ...

    async def get_by_client_msg_id(
        self,
        conversation_id: str,
        sender_id: str,
        client_msg_id: str,
    ) -> Message | None: ...

    async def mark_read(self, conversation_id: str, reader_id: str) -> int:
        """Flip is_read on every unread message not sent by reader. Return rows changed."""
        ...
