from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from nearlink_chat.api.deps import ClockDep, CurrentPrincipal, UoWDep
from nearlink_chat.api.v1.schemas.common import PaginatedResponse
from nearlink_chat.api.v1.schemas.conversation import (
    ConversationResponse,
    ConversationSummaryResponse,
    MarkConversationReadResponse,
    OpenConversationRequest,
)
from nearlink_chat.application.exceptions import ValidationError
from nearlink_chat.application.pagination import encode_cursor
from nearlink_chat.config import settings
from nearlink_chat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse)
async def open_conversation(
    body: OpenConversationRequest,
    response: Response,
    principal: CurrentPrincipal,
    uow: UoWDep,
    clock: ClockDep,
) -> ConversationResponse:
    if body.other_user_id == principal.user_id:
        raise ValidationError("Cannot start a conversation with yourself")

    conv, created = await conversation_service.resolve_or_create(
        principal.user_id,
        body.other_user_id,
        principal,
        uow,
        listing_id=body.listing_id,
        request_id=body.request_id,
        normalize_pair=settings.NORMALIZE_PARTICIPANT_PAIR,
        clock=clock,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.get("", response_model=PaginatedResponse[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ConversationSummaryResponse]:
    summaries = await conversation_service.list_user_conversations(
        principal, uow, cursor=cursor, limit=limit,
    )
    next_cursor = None
    if len(summaries) == limit:
        last = summaries[-1].conversation
        next_cursor = encode_cursor(last.last_activity_at, last.id)
    return PaginatedResponse[ConversationSummaryResponse](
        items=[
            ConversationSummaryResponse.model_validate(s, from_attributes=True)
            for s in summaries
        ],
        next_cursor=next_cursor,
    )


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.post("/{conversation_id}/read", response_model=MarkConversationReadResponse)
async def mark_conversation_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    clock: ClockDep,
) -> MarkConversationReadResponse:
    updated = await message_service.mark_conversation_read(
        conversation_id, principal, uow, clock=clock,
    )
    return MarkConversationReadResponse(updated=updated)
