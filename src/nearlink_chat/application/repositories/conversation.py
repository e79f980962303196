from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from nearlink_chat.application.dto.conversation import ConversationKey
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.summary import ConversationSummary


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        """Unfiltered lookup used to evaluate access rules against the row."""
        ...

    async def find_by_key(
        self, key: ConversationKey, *, viewer_id: UUID,
    ) -> Conversation | None:
        """Exact match on the ordered participant pair and both refs (NULL == NULL)."""
        ...

    async def list_summaries_for_user(
        self, user_id: UUID, *, cursor: str | None = None, limit: int = 20,
    ) -> list[ConversationSummary]: ...


class ConversationWriter(Protocol):
    async def create_if_not_exists(
        self, conversation: Conversation, *, viewer_id: UUID,
    ) -> tuple[Conversation, bool]:
        """Insert conversation. Return (conversation, created). On key conflict → return existing."""
        ...

    async def touch_last_activity(
        self, conversation_id: UUID, ts: datetime, *, viewer_id: UUID,
    ) -> None: ...
