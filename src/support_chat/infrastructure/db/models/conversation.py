from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index, Integer, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from support_chat.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: uuid.uuid4().hex,
    )
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    admin_id: Mapped[str] = mapped_column(String(64), nullable=False)
    # No FK: messages already reference conversations and the cycle buys nothing.
    last_message_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    customer_unread_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    admin_unread_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    messages = relationship(
        "MessageModel",
        back_populates="conversation",
        lazy="noload",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("customer_id", "admin_id", name="uq_conversation_pair"),
        Index("ix_conversations_customer_updated", "customer_id", updated_at.desc()),
        Index("ix_conversations_admin_updated", "admin_id", updated_at.desc()),
    )
