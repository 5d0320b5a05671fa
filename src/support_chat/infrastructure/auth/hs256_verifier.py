from __future__ import annotations

import jwt

from support_chat.application.dto.principal import Principal


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        roles = payload.get("roles", [])
        is_admin = (
            bool(payload.get("isAdmin"))
            or payload.get("kind") == "admin"
            or "admin" in roles
        )
        return Principal(
            user_id=str(payload["sub"]),
            is_admin=is_admin,
            name=payload.get("name"),
            roles=roles,
        )
