from __future__ import annotations

from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ForbiddenError, NotFoundError
from support_chat.domain.entities.conversation import Conversation


def assert_conversation_access(
    principal: Principal,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or principal has no access."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    # Admins have global access
    if principal.is_admin:
        return conversation

    if not conversation.is_participant(principal.user_id):
        raise ForbiddenError("Not a participant of this conversation")

    return conversation


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
