from __future__ import annotations

import logging
from datetime import datetime, timezone

from support_chat.application.exceptions import NotFoundError, ValidationError
from support_chat.application.ports.bus import EventPublisher, conversation_key
from support_chat.application.uow import UnitOfWork
from support_chat.domain.events.messages_read import MessagesRead

logger = logging.getLogger(__name__)


async def mark_read(
    conversation_id: str,
    reader_id: str,
    uow: UnitOfWork,
    publisher: EventPublisher,
) -> int:
    """Mark every unread message the reader did not send as read.

    One conditional bulk update, so repeated calls change nothing further.
    A read receipt is broadcast after every successful commit, including
    no-op ones. Returns the number of messages flipped.
    """
    if not conversation_id or not reader_id:
        raise ValidationError("Missing required fields")

    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")

        updated = await uow.messages_w.mark_read(conversation_id, reader_id)
        role = conversation.role_of(reader_id)
        if role is not None:
            await uow.conversations_w.reset_unread(conversation_id, role)
        await uow.commit()

    event = MessagesRead(
        conversation_id=conversation_id,
        reader_id=reader_id,
        updated=updated,
        read_at=datetime.now(timezone.utc),
    )
    publisher.publish([conversation_key(conversation_id)], event.to_payload())
    if updated:
        logger.info("%s read %d messages in %s", reader_id, updated, conversation_id)
    return updated
