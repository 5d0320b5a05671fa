from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from support_chat.application.policies.permissions import assert_conversation_access
from support_chat.application.ports.bus import ADMIN_AUDIENCE, EventPublisher, conversation_key
from support_chat.application.uow import UnitOfWork
from support_chat.domain.entities.message import Message
from support_chat.domain.events.message_created import MessageCreated
from support_chat.domain.value_objects.enums import ParticipantRole
from support_chat.domain.value_objects.ids import new_id

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


async def send_message(
    conversation_id: str,
    sender_id: str,
    content: str,
    uow: UnitOfWork,
    publisher: EventPublisher,
    *,
    client_msg_id: str | None = None,
) -> Message:
    """Persist a message, then fan it out.

    The event goes to the conversation's subscribers and, for customer
    messages, to the admin audience. Nothing is broadcast unless the commit
    succeeded. A retry carrying an already-stored ``client_msg_id`` returns
    the stored message and is not broadcast again.
    """
    if not conversation_id or not sender_id:
        raise ValidationError("Missing required fields")
    if not content or not content.strip():
        raise ValidationError("Message content must not be empty")

    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        role = conversation.role_of(sender_id)
        if role is None:
            raise ForbiddenError("Not a participant of this conversation")

        # created_at must keep increasing within the conversation even if the
        # wall clock steps back.
        now = datetime.now(timezone.utc)
        if now <= conversation.updated_at:
            now = conversation.updated_at + _TICK

        msg = Message(
            id=new_id(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            created_at=now,
            is_read=False,
            client_msg_id=client_msg_id,
        )
        msg, created = await uow.messages_w.create_if_not_exists(msg)
        if not created:
            logger.info("Duplicate send %s in %s, returning stored message", client_msg_id, conversation_id)
            return msg

        await uow.conversations_w.record_message(
            conversation_id, msg.id, msg.created_at, role.counterpart,
        )
        await uow.commit()

    keys = [conversation_key(conversation_id)]
    if role is ParticipantRole.CUSTOMER:
        keys.append(ADMIN_AUDIENCE)
    delivered = publisher.publish(keys, MessageCreated(msg).to_payload())
    logger.info(
        "Message %s stored in %s, delivered to %d connections",
        msg.id, conversation_id, delivered,
    )
    return msg


async def list_messages(
    conversation_id: str,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
        assert_conversation_access(principal, conversation)
        return await uow.messages.list_messages(
            conversation_id, cursor=cursor, limit=limit,
        )
