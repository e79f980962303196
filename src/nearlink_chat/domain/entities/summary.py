from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """Inbox row: a conversation as seen by one of its participants."""

    conversation: Conversation
    other_participant_id: UUID
    last_message: Message | None
    unread_count: int
