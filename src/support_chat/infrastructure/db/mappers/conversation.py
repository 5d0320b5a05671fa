from __future__ import annotations

from support_chat.domain.entities.conversation import Conversation
from support_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        customer_id=model.customer_id,
        admin_id=model.admin_id,
        last_message_id=model.last_message_id,
        customer_unread_count=model.customer_unread_count,
        admin_unread_count=model.admin_unread_count,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Conversation) -> dict:
    return {
        "id": entity.id,
        "customer_id": entity.customer_id,
        "admin_id": entity.admin_id,
        "last_message_id": entity.last_message_id,
        "customer_unread_count": entity.customer_unread_count,
        "admin_unread_count": entity.admin_unread_count,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
