from __future__ import annotations

from support_chat.application.exceptions import ValidationError
from support_chat.application.ports.bus import EventPublisher, conversation_key
from support_chat.domain.events.typing_changed import TypingChanged


def set_typing(
    conversation_id: str | None,
    user_id: str | None,
    is_typing: bool,
    user_name: str | None,
    publisher: EventPublisher,
    *,
    origin_connection: str | None = None,
) -> int:
    """Relay a typing indicator to the other side of the conversation.

    Never persisted and never expired server-side; clients drop stale
    indicators themselves. Without an originating connection id every
    connection of the typing user is skipped.
    """
    if not conversation_id or not user_id:
        raise ValidationError("Missing required fields")

    event = TypingChanged(
        conversation_id=conversation_id,
        user_id=user_id,
        is_typing=bool(is_typing),
        user_name=user_name,
    )
    if origin_connection:
        return publisher.publish(
            [conversation_key(conversation_id)], event.to_payload(),
            exclude_connection=origin_connection,
        )
    return publisher.publish(
        [conversation_key(conversation_id)], event.to_payload(),
        exclude_user=user_id,
    )
