from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from nearlink_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None:
        """Unfiltered lookup used to evaluate access rules against the row."""
        ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        viewer_id: UUID,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        """Newest first: created_at DESC, id DESC."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message, *, viewer_id: UUID) -> Message: ...

    async def mark_read(
        self, message_id: UUID, ts: datetime, *, viewer_id: UUID,
    ) -> Message:
        """Set read_at if still null. Raise ForbiddenError if the row is not updatable by viewer."""
        ...

    async def mark_conversation_read(
        self, conversation_id: UUID, ts: datetime, *, viewer_id: UUID,
    ) -> int: ...
