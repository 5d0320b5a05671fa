from __future__ import annotations

from support_chat.application.dto.conversation import ConversationSummary
from support_chat.application.ports.clock import Clock, SystemClock, start_of_day
from support_chat.application.uow import UnitOfWork
from support_chat.domain.entities.stats import ConversationStats


async def get_stats(
    admin_id: str | None,
    uow: UnitOfWork,
    *,
    clock: Clock | None = None,
) -> ConversationStats:
    """Dashboard counters, scoped to one admin or, with ``None``, to everything.

    "Today" starts at UTC midnight.
    """
    since = start_of_day((clock or SystemClock()).now())
    async with uow:
        return await uow.conversations.stats(admin_id, since=since)


async def list_admin_conversations(
    admin_id: str,
    uow: UnitOfWork,
) -> list[ConversationSummary]:
    async with uow:
        return await uow.conversations.list_for_admin(admin_id)
