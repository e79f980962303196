from __future__ import annotations

from uuid import UUID

import jwt

from nearlink_chat.application.dto.principal import Principal


def principal_from_claims(payload: dict) -> Principal:
    """The identity platform puts the user's uuid in ``sub``."""
    return Principal(
        user_id=UUID(payload["sub"]),
        role=payload.get("role", "authenticated"),
    )


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: str | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            audience=self._audience,
            options={"verify_aud": self._audience is not None},
        )
        return principal_from_claims(payload)
