from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: str
    is_admin: bool = False
    name: str | None = None
    roles: list[str] = field(default_factory=list)
