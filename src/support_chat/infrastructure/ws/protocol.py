"""Legacy socket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # send_message | ping
    data: Any = None


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # receive_message | pong | keepalive | error
    data: Any = None
