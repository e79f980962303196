from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationKey:
    """The ordered tuple a conversation is unique on."""

    participant_a: UUID
    participant_b: UUID
    listing_id: UUID | None = None
    request_id: UUID | None = None

    def normalized(self) -> ConversationKey:
        """Return the key with the participant pair in canonical order."""
        a, b = sorted((self.participant_a, self.participant_b), key=str)
        return ConversationKey(a, b, self.listing_id, self.request_id)
