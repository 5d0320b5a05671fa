from __future__ import annotations

from support_chat.domain.entities.message import Message
from support_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        content=model.content,
        created_at=model.created_at,
        is_read=model.is_read,
        client_msg_id=model.client_msg_id,
    )


def entity_to_values(entity: Message) -> dict:
    return {
        "id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "content": entity.content,
        "created_at": entity.created_at,
        "is_read": entity.is_read,
        "client_msg_id": entity.client_msg_id,
    }
