from __future__ import annotations

from datetime import datetime
from typing import Protocol

from support_chat.application.dto.conversation import ConversationSummary
from support_chat.domain.entities.conversation import Conversation
from support_chat.domain.entities.stats import ConversationStats
from support_chat.domain.value_objects.enums import ParticipantRole


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: str) -> Conversation | None: ...

    async def get_between(
        self, customer_id: str, admin_id: str,
    ) -> Conversation | None: ...

    async def list_for_user(self, user_id: str) -> list[ConversationSummary]:
        """Conversations the user takes part in, most recently updated first."""
        ...

    async def list_for_admin(self, admin_id: str) -> list[ConversationSummary]:
        """Admin inbox: conversations with unread messages first, then by recency."""
        ...

    async def stats(
        self, admin_id: str | None, *, since: datetime,
    ) -> ConversationStats:
        """Aggregate counts; ``admin_id=None`` covers every conversation."""
        ...


class ConversationWriter(Protocol):
    async def get_or_create(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert unless the (customer, admin) pair exists. Return (conversation, created)."""
        ...

    async def record_message(
        self,
        conversation_id: str,
        message_id: str,
        ts: datetime,
        recipient: ParticipantRole,
    ) -> None:
        """Point last_message at the new row, advance updated_at, bump recipient unread."""
        ...

    async def reset_unread(
        self, conversation_id: str, role: ParticipantRole,
    ) -> None: ...
