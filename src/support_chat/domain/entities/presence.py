from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class PresenceEntry:
    """Liveness of one user across all of their open connections."""

    user_id: str
    connections: int
    connected_at: datetime
    last_seen: datetime
