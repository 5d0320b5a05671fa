"""Shared test fixtures."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import pytest

from support_chat.application.dto.conversation import ConversationSummary
from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import PersistenceError
from support_chat.domain.entities.conversation import Conversation
from support_chat.domain.entities.message import Message
from support_chat.domain.entities.stats import ConversationStats
from support_chat.domain.value_objects.enums import ParticipantRole
from support_chat.domain.value_objects.ids import new_id

CUSTOMER_ID = "cust-42"
ADMIN_ID = "admin-1"


@pytest.fixture
def user_principal() -> Principal:
    return Principal(user_id=CUSTOMER_ID, name="Alice")


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(user_id=ADMIN_ID, is_admin=True, name="Support", roles=["admin"])


def make_conversation(
    *,
    conversation_id: str | None = None,
    customer_id: str = CUSTOMER_ID,
    admin_id: str = ADMIN_ID,
    updated_at: datetime | None = None,
) -> Conversation:
    now = datetime.now(timezone.utc)
    return Conversation(
        id=conversation_id or new_id(),
        customer_id=customer_id,
        admin_id=admin_id,
        last_message_id=None,
        customer_unread_count=0,
        admin_unread_count=0,
        created_at=now,
        updated_at=updated_at or now,
    )


def make_message(
    *,
    conversation_id: str,
    sender_id: str = CUSTOMER_ID,
    content: str = "hello",
    is_read: bool = False,
    created_at: datetime | None = None,
    client_msg_id: str | None = None,
) -> Message:
    return Message(
        id=new_id(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        created_at=created_at or datetime.now(timezone.utc),
        is_read=is_read,
        client_msg_id=client_msg_id,
    )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_messages(
        self, conversation_id: str, *, cursor: str | None = None, limit: int = 50,
    ) -> list[Message]:
        rows = sorted(
            (m for m in self._messages if m.conversation_id == conversation_id),
            key=lambda m: (m.created_at, m.id),
        )
        return rows[:limit]

    async def count_for_conversation(self, conversation_id: str) -> int:
        return sum(1 for m in self._messages if m.conversation_id == conversation_id)


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        if message.client_msg_id is not None:
            existing = await self.get_by_client_msg_id(
                message.conversation_id, message.sender_id, message.client_msg_id,
            )
            if existing is not None:
                return existing, False
        self._reader._messages.append(message)
        return message, True

    async def get_by_client_msg_id(
        self, conversation_id: str, sender_id: str, client_msg_id: str,
    ) -> Message | None:
        for m in self._reader._messages:
            if (
                m.conversation_id == conversation_id
                and m.sender_id == sender_id
                and m.client_msg_id == client_msg_id
            ):
                return m
        return None

    async def mark_read(self, conversation_id: str, reader_id: str) -> int:
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.conversation_id == conversation_id and m.sender_id != reader_id and not m.is_read:
                self._reader._messages[i] = replace(m, is_read=True)
                updated += 1
        return updated


@dataclass
class FakeConversationReader:
    _store: dict[str, Conversation] = field(default_factory=dict)
    _messages: FakeMessageReader | None = None
    last_stats_since: datetime | None = None

    def add(self, conversation: Conversation) -> Conversation:
        self._store[conversation.id] = conversation
        return conversation

    async def get_by_id(self, conversation_id: str) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_between(self, customer_id: str, admin_id: str) -> Conversation | None:
        for c in self._store.values():
            if c.customer_id == customer_id and c.admin_id == admin_id:
                return c
        return None

    async def list_for_user(self, user_id: str) -> list[ConversationSummary]:
        convs = [c for c in self._store.values() if c.is_participant(user_id)]
        convs.sort(key=lambda c: c.updated_at, reverse=True)
        return [self._summary(c, user_id) for c in convs]

    async def list_for_admin(self, admin_id: str) -> list[ConversationSummary]:
        convs = [c for c in self._store.values() if c.admin_id == admin_id]
        convs.sort(key=lambda c: c.updated_at, reverse=True)
        convs.sort(key=lambda c: c.admin_unread_count == 0)
        return [self._summary(c, admin_id) for c in convs]

    async def stats(self, admin_id: str | None, *, since: datetime) -> ConversationStats:
        self.last_stats_since = since
        convs = [c for c in self._store.values() if admin_id is None or c.admin_id == admin_id]
        ids = {c.id for c in convs}
        messages = self._messages._messages if self._messages else []
        unread = {
            m.conversation_id for m in messages
            if m.conversation_id in ids
            and not m.is_read
            and m.sender_id != self._store[m.conversation_id].admin_id
        }
        today = [m for m in messages if m.conversation_id in ids and m.created_at >= since]
        return ConversationStats(
            total_conversations=len(convs),
            unread_conversations=len(unread),
            today_messages=len(today),
        )

    def _summary(self, conv: Conversation, viewer_id: str) -> ConversationSummary:
        last = None
        if conv.last_message_id and self._messages:
            last = next((m for m in self._messages._messages if m.id == conv.last_message_id), None)
        return ConversationSummary(
            conversation=conv, last_message=last, unread_count=conv.unread_for(viewer_id),
        )


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader

    async def get_or_create(self, conversation: Conversation) -> tuple[Conversation, bool]:
        existing = await self._reader.get_between(conversation.customer_id, conversation.admin_id)
        if existing is not None:
            return existing, False
        return self._reader.add(conversation), True

    async def record_message(
        self,
        conversation_id: str,
        message_id: str,
        ts: datetime,
        recipient: ParticipantRole,
    ) -> None:
        conv = self._reader._store[conversation_id]
        counters = (
            {"admin_unread_count": conv.admin_unread_count + 1}
            if recipient is ParticipantRole.ADMIN
            else {"customer_unread_count": conv.customer_unread_count + 1}
        )
        newer = ts >= conv.updated_at
        self._reader._store[conversation_id] = replace(
            conv,
            last_message_id=message_id if newer else conv.last_message_id,
            updated_at=max(conv.updated_at, ts),
            **counters,
        )

    async def reset_unread(self, conversation_id: str, role: ParticipantRole) -> None:
        conv = self._reader._store[conversation_id]
        field_name = (
            "admin_unread_count" if role is ParticipantRole.ADMIN else "customer_unread_count"
        )
        self._reader._store[conversation_id] = replace(conv, **{field_name: 0})


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests.

    Set ``fail_commit`` to make ``commit()`` raise ``PersistenceError`` the
    way the SQLAlchemy UoW does when the store rejects a write.
    """
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    conversations: FakeConversationReader | None = None
    conversations_w: FakeConversationWriter | None = None
    messages_w: FakeMessageWriter | None = None
    fail_commit: bool = False
    _committed: bool = False
    _rolled_back: bool = False

    def __post_init__(self) -> None:
        if self.conversations is None:
            self.conversations = FakeConversationReader(_messages=self.messages)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        if self.fail_commit:
            raise PersistenceError("Storage operation failed")
        self._committed = True

    async def rollback(self) -> None:
        self._rolled_back = True

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is not None:
            await self.rollback()


@dataclass
class FakePublisher:
    """Records every publish call instead of delivering it."""
    published: list[dict[str, Any]] = field(default_factory=list)

    def publish(
        self,
        keys: Iterable[str],
        event: dict[str, Any],
        *,
        exclude_connection: str | None = None,
        exclude_user: str | None = None,
    ) -> int:
        self.published.append({
            "keys": list(keys),
            "event": event,
            "exclude_connection": exclude_connection,
            "exclude_user": exclude_user,
        })
        return 1

    def events(self, event_type: str) -> list[dict[str, Any]]:
        return [p["event"] for p in self.published if p["event"].get("type") == event_type]


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def conversation(uow: FakeUoW) -> Conversation:
    return uow.conversations.add(make_conversation())
