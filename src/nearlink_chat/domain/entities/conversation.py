from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Conversation:
    """A thread between two users, optionally about one listing or request.

    The participant pair is stored in the order the conversation was opened
    with; ``participant_a`` is the user who initiated it.
    """

    id: UUID
    participant_a: UUID
    participant_b: UUID
    listing_id: UUID | None
    request_id: UUID | None
    last_activity_at: datetime
    created_at: datetime

    def has_participant(self, user_id: UUID) -> bool:
        return user_id in (self.participant_a, self.participant_b)

    def other_participant(self, user_id: UUID) -> UUID:
        if user_id == self.participant_a:
            return self.participant_b
        return self.participant_a
