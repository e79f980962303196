from __future__ import annotations

from typing import Protocol

from nearlink_chat.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer token issued by the identity platform into a Principal."""

    async def verify(self, token: str) -> Principal: ...
