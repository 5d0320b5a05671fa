"""Seed development data: creates the schema, a sample conversation and messages."""
from __future__ import annotations

import asyncio
import logging

from support_chat.api.middleware.correlation_id import configure_logging
from support_chat.config import settings
from support_chat.infrastructure.db.session import AsyncSessionLocal, create_schema, engine
from support_chat.infrastructure.db.uow import SqlAlchemyUoW
from support_chat.infrastructure.realtime.registry import PresenceRegistry
from support_chat.services import conversation_service, message_service

logger = logging.getLogger(__name__)

CUSTOMER_ID = "demo-customer"


async def seed() -> None:
    await create_schema()
    admin_id = settings.SUPPORT_ADMIN_ID or "demo-admin"
    # Nobody is listening yet; the registry just absorbs the broadcasts.
    publisher = PresenceRegistry()

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        conv, _ = await conversation_service.get_or_create_conversation(CUSTOMER_ID, admin_id, uow)

        messages_data = [
            (CUSTOMER_ID, "Hi! I have a problem with my order."),
            (admin_id, "Hello! What is the order number?"),
            (CUSTOMER_ID, "Order #12345"),
            (admin_id, "Thanks, checking now. One moment."),
        ]
        for i, (sender_id, content) in enumerate(messages_data):
            await message_service.send_message(
                conv.id, sender_id, content, uow, publisher, client_msg_id=f"seed-{i}",
            )

    await engine.dispose()
    logger.info("Seeded conversation %s with %d messages", conv.id, len(messages_data))


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
