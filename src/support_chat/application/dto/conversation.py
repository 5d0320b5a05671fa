from __future__ import annotations

from dataclasses import dataclass

from support_chat.domain.entities.conversation import Conversation
from support_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """A conversation as seen by one of its participants."""

    conversation: Conversation
    last_message: Message | None
    unread_count: int
