from __future__ import annotations

from enum import StrEnum


class ParticipantRole(StrEnum):
    CUSTOMER = "customer"
    ADMIN = "admin"

    @property
    def counterpart(self) -> ParticipantRole:
        if self is ParticipantRole.CUSTOMER:
            return ParticipantRole.ADMIN
        return ParticipantRole.CUSTOMER


class EventType(StrEnum):
    CONNECTED = "connected"
    PING = "ping"
    NEW_MESSAGE = "new_message"
    TYPING = "typing"
    READ_RECEIPT = "read_receipt"
    PRESENCE = "presence"


class ConnectionState(StrEnum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
