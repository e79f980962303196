from __future__ import annotations

import logging
import uuid

from nearlink_chat.application.dto.principal import Principal
from nearlink_chat.application.exceptions import AppError
from nearlink_chat.application.policies.permissions import (
    assert_can_mark_conversation_read,
    assert_can_mark_read,
    assert_can_send,
    assert_conversation_access,
)
from nearlink_chat.application.ports.clock import Clock, system_clock
from nearlink_chat.application.uow import UnitOfWork
from nearlink_chat.domain.entities.message import Message

logger = logging.getLogger(__name__)


async def send_message(
    conversation_id: uuid.UUID,
    sender_id: uuid.UUID,
    content: str,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> Message:
    """Append a message and bump the conversation's last activity.

    Both writes are committed together. A failed activity bump is logged
    and does not fail the send.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_can_send(principal, conversation, sender_id)

    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        created_at=clock.now(),
        read_at=None,
    )
    msg = await uow.messages_w.create(msg, viewer_id=principal.user_id)

    try:
        await uow.conversations_w.touch_last_activity(
            conversation_id, msg.created_at, viewer_id=principal.user_id,
        )
    except AppError as exc:
        logger.warning(
            "Could not bump last activity of conversation %s: %s",
            conversation_id,
            exc.detail,
        )

    await uow.commit()
    logger.debug("Message %s sent to conversation %s", msg.id, conversation_id)
    return msg


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    cursor: str | None = None,
    limit: int | None = None,
) -> list[Message]:
    """Messages of a conversation, newest first."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(principal, conversation)
    return await uow.messages.list_messages(
        conversation_id, viewer_id=principal.user_id, cursor=cursor, limit=limit,
    )


async def mark_read(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> Message:
    message = await uow.messages.get_by_id(message_id)
    conversation = (
        await uow.conversations.get_by_id(message.conversation_id)
        if message is not None
        else None
    )
    assert_can_mark_read(principal, conversation, message)

    updated = await uow.messages_w.mark_read(
        message_id, clock.now(), viewer_id=principal.user_id,
    )
    await uow.commit()
    logger.debug("Message %s read at %s", message_id, updated.read_at)
    return updated


async def mark_conversation_read(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> int:
    """Mark every unread message from the other side as read. Returns the count."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_can_mark_conversation_read(principal, conversation)

    updated = await uow.messages_w.mark_conversation_read(
        conversation_id, clock.now(), viewer_id=principal.user_id,
    )
    if updated:
        await uow.commit()
        logger.info(
            "Marked %d message(s) read in conversation %s", updated, conversation_id,
        )
    return updated
