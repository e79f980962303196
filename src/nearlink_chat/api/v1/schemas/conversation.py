from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, model_validator

from nearlink_chat.api.v1.schemas.message import MessageResponse


class OpenConversationRequest(BaseModel):
    other_user_id: UUID
    listing_id: UUID | None = None
    request_id: UUID | None = None

    @model_validator(mode="after")
    def _single_context(self) -> OpenConversationRequest:
        if self.listing_id is not None and self.request_id is not None:
            raise ValueError("A conversation is about a listing or a request, not both")
        return self


class ConversationResponse(BaseModel):
    id: UUID
    participant_a: UUID
    participant_b: UUID
    listing_id: UUID | None
    request_id: UUID | None
    last_activity_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversationSummaryResponse(BaseModel):
    conversation: ConversationResponse
    other_participant_id: UUID
    last_message: MessageResponse | None
    unread_count: int

    model_config = {"from_attributes": True}


class MarkConversationReadResponse(BaseModel):
    updated: int
