from __future__ import annotations

import logging
from datetime import datetime, timezone

from support_chat.application.dto.conversation import ConversationSummary
from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ValidationError
from support_chat.application.policies.permissions import assert_conversation_access
from support_chat.application.uow import UnitOfWork
from support_chat.domain.entities.conversation import Conversation
from support_chat.domain.value_objects.ids import new_id

logger = logging.getLogger(__name__)


async def get_or_create_conversation(
    customer_id: str,
    admin_id: str,
    uow: UnitOfWork,
) -> tuple[Conversation, bool]:
    """Return the conversation between the pair, creating it on first contact.

    Returns (conversation, created).
    """
    if not customer_id or not admin_id:
        raise ValidationError("Missing required fields")
    if customer_id == admin_id:
        raise ValidationError("A conversation needs two distinct participants")

    async with uow:
        existing = await uow.conversations.get_between(customer_id, admin_id)
        if existing is not None:
            return existing, False

        now = datetime.now(timezone.utc)
        conversation, created = await uow.conversations_w.get_or_create(
            Conversation(
                id=new_id(),
                customer_id=customer_id,
                admin_id=admin_id,
                last_message_id=None,
                customer_unread_count=0,
                admin_unread_count=0,
                created_at=now,
                updated_at=now,
            )
        )
        await uow.commit()

    if created:
        logger.info("Conversation %s opened between %s and %s", conversation.id, customer_id, admin_id)
    return conversation, created


async def open_conversation(
    principal: Principal,
    participant_id: str | None,
    uow: UnitOfWork,
    *,
    support_admin_id: str | None = None,
) -> tuple[Conversation, bool]:
    """Resolve the caller's side of the pair and get-or-create the conversation.

    Customers talk to ``participant_id`` when given, otherwise to the
    configured support admin. Admins must name the customer.
    """
    if principal.is_admin:
        if not participant_id:
            raise ValidationError("participantId is required")
        return await get_or_create_conversation(participant_id, principal.user_id, uow)

    admin_id = participant_id or support_admin_id
    if not admin_id:
        raise ValidationError("participantId is required")
    return await get_or_create_conversation(principal.user_id, admin_id, uow)


async def list_user_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationSummary]:
    async with uow:
        return await uow.conversations.list_for_user(principal.user_id)


async def get_conversation(
    conversation_id: str,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
        return assert_conversation_access(principal, conversation)
