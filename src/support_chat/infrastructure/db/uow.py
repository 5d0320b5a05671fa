from __future__ import annotations

import logging
from types import TracebackType
from typing import Self

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from support_chat.application.exceptions import PersistenceError
from support_chat.infrastructure.db.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from support_chat.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession.

    Used as ``async with uow:``, any exception rolls the session back and
    driver/ORM errors surface as ``PersistenceError``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.conversations = ConversationReaderRepo(session)
        self.conversations_w = ConversationWriterRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            return
        await self.rollback()
        if isinstance(exc_val, SQLAlchemyError):
            logger.error("Store operation failed: %s", exc_val)
            raise PersistenceError("Storage operation failed") from exc_val
