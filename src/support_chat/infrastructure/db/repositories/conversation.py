from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from support_chat.application.dto.conversation import ConversationSummary
from support_chat.domain.entities.conversation import Conversation
from support_chat.domain.entities.stats import ConversationStats
from support_chat.domain.value_objects.enums import ParticipantRole
from support_chat.infrastructure.db.mappers import conversation as mapper
from support_chat.infrastructure.db.mappers import message as message_mapper
from support_chat.infrastructure.db.models.conversation import ConversationModel
from support_chat.infrastructure.db.models.message import MessageModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: str) -> Conversation | None:
        result = await self._session.get(
            ConversationModel, conversation_id, populate_existing=True,
        )
        return mapper.model_to_entity(result) if result else None

    async def get_between(self, customer_id: str, admin_id: str) -> Conversation | None:
        stmt = select(ConversationModel).where(
            ConversationModel.customer_id == customer_id,
            ConversationModel.admin_id == admin_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(self, user_id: str) -> list[ConversationSummary]:
        stmt = (
            select(ConversationModel, MessageModel)
            .outerjoin(MessageModel, MessageModel.id == ConversationModel.last_message_id)
            .where(
                or_(
                    ConversationModel.customer_id == user_id,
                    ConversationModel.admin_id == user_id,
                )
            )
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._summary(conv, last, user_id) for conv, last in result.all()]

    async def list_for_admin(self, admin_id: str) -> list[ConversationSummary]:
        has_unread = case((ConversationModel.admin_unread_count > 0, 0), else_=1)
        stmt = (
            select(ConversationModel, MessageModel)
            .outerjoin(MessageModel, MessageModel.id == ConversationModel.last_message_id)
            .where(ConversationModel.admin_id == admin_id)
            .order_by(has_unread, ConversationModel.updated_at.desc(), ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._summary(conv, last, admin_id) for conv, last in result.all()]

    async def stats(self, admin_id: str | None, *, since: datetime) -> ConversationStats:
        total_stmt = select(func.count()).select_from(ConversationModel)
        unread_stmt = (
            select(func.count(func.distinct(MessageModel.conversation_id)))
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .where(
                MessageModel.is_read.is_(False),
                MessageModel.sender_id != ConversationModel.admin_id,
            )
        )
        today_stmt = (
            select(func.count(MessageModel.id))
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .where(MessageModel.created_at >= since)
        )
        if admin_id is not None:
            total_stmt = total_stmt.where(ConversationModel.admin_id == admin_id)
            unread_stmt = unread_stmt.where(ConversationModel.admin_id == admin_id)
            today_stmt = today_stmt.where(ConversationModel.admin_id == admin_id)

        total = (await self._session.execute(total_stmt)).scalar_one()
        unread = (await self._session.execute(unread_stmt)).scalar_one()
        today = (await self._session.execute(today_stmt)).scalar_one()
        return ConversationStats(
            total_conversations=total,
            unread_conversations=unread,
            today_messages=today,
        )

    @staticmethod
    def _summary(
        conv: ConversationModel, last: MessageModel | None, viewer_id: str,
    ) -> ConversationSummary:
        conversation = mapper.model_to_entity(conv)
        return ConversationSummary(
            conversation=conversation,
            last_message=message_mapper.model_to_entity(last) if last else None,
            unread_count=conversation.unread_for(viewer_id),
        )


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_or_create(self, conversation: Conversation) -> tuple[Conversation, bool]:
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row), True

        # Pair already existed or a concurrent insert won; return the stored row
        existing = await self._session.execute(
            select(ConversationModel).where(
                ConversationModel.customer_id == conversation.customer_id,
                ConversationModel.admin_id == conversation.admin_id,
            )
        )
        return mapper.model_to_entity(existing.scalar_one()), False

    async def record_message(
        self,
        conversation_id: str,
        message_id: str,
        ts: datetime,
        recipient: ParticipantRole,
    ) -> None:
        if recipient is ParticipantRole.ADMIN:
            counter = {"admin_unread_count": ConversationModel.admin_unread_count + 1}
        else:
            counter = {"customer_unread_count": ConversationModel.customer_unread_count + 1}
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(
                # SET expressions see the pre-update row, so an older commit
                # landing late cannot move last_message or updated_at backwards.
                last_message_id=case(
                    (ConversationModel.updated_at <= ts, message_id),
                    else_=ConversationModel.last_message_id,
                ),
                updated_at=func.greatest(ConversationModel.updated_at, ts),
                **counter,
            )
        )
        await self._session.execute(stmt)

    async def reset_unread(self, conversation_id: str, role: ParticipantRole) -> None:
        column = "admin_unread_count" if role is ParticipantRole.ADMIN else "customer_unread_count"
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values({column: 0})
        )
        await self._session.execute(stmt)
