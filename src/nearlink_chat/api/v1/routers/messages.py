from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from nearlink_chat.api.deps import ClockDep, CurrentPrincipal, UoWDep
from nearlink_chat.api.v1.schemas.common import PaginatedResponse
from nearlink_chat.api.v1.schemas.message import MessageResponse, SendMessageRequest
from nearlink_chat.application.pagination import encode_cursor
from nearlink_chat.config import settings
from nearlink_chat.services import message_service

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=PaginatedResponse[MessageResponse],
)
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=200),
) -> PaginatedResponse[MessageResponse]:
    limit = limit or settings.DEFAULT_PAGE_SIZE
    messages = await message_service.list_messages(
        conversation_id, principal, uow, cursor=cursor, limit=limit,
    )
    next_cursor = None
    if len(messages) == limit:
        next_cursor = encode_cursor(messages[-1].created_at, messages[-1].id)
    return PaginatedResponse[MessageResponse](
        items=[MessageResponse.model_validate(m, from_attributes=True) for m in messages],
        next_cursor=next_cursor,
    )


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    clock: ClockDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        conversation_id,
        principal.user_id,
        body.content,
        principal,
        uow,
        clock=clock,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/messages/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    clock: ClockDep,
) -> MessageResponse:
    msg = await message_service.mark_read(message_id, principal, uow, clock=clock)
    return MessageResponse.model_validate(msg, from_attributes=True)
