from __future__ import annotations

import logging
import uuid

from nearlink_chat.application.dto.conversation import ConversationKey
from nearlink_chat.application.dto.principal import Principal
from nearlink_chat.application.policies.permissions import (
    assert_can_open_conversation,
    assert_conversation_access,
)
from nearlink_chat.application.ports.clock import Clock, system_clock
from nearlink_chat.application.uow import UnitOfWork
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.summary import ConversationSummary

logger = logging.getLogger(__name__)


async def resolve_or_create(
    user_id: uuid.UUID,
    other_user_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    listing_id: uuid.UUID | None = None,
    request_id: uuid.UUID | None = None,
    normalize_pair: bool = False,
    clock: Clock = system_clock,
) -> tuple[Conversation, bool]:
    """Return the conversation for the ordered tuple, creating it on first contact.

    Matching is exact on (user_id, other_user_id, listing_id, request_id):
    the reversed pair is a different conversation unless ``normalize_pair``
    is set, in which case both ids are sorted before lookup and insert.
    Self-conversations and double refs are not rejected here.

    Returns (conversation, created).
    """
    key = ConversationKey(user_id, other_user_id, listing_id, request_id)
    if normalize_pair:
        key = key.normalized()

    assert_can_open_conversation(principal, key.participant_a, key.participant_b)

    existing = await uow.conversations.find_by_key(key, viewer_id=principal.user_id)
    if existing is not None:
        return existing, False

    now = clock.now()
    conversation = Conversation(
        id=uuid.uuid4(),
        participant_a=key.participant_a,
        participant_b=key.participant_b,
        listing_id=key.listing_id,
        request_id=key.request_id,
        last_activity_at=now,
        created_at=now,
    )
    conversation, created = await uow.conversations_w.create_if_not_exists(
        conversation, viewer_id=principal.user_id,
    )
    if created:
        await uow.commit()
        logger.info(
            "Conversation %s opened by %s with %s (listing=%s, request=%s)",
            conversation.id,
            conversation.participant_a,
            conversation.participant_b,
            conversation.listing_id,
            conversation.request_id,
        )
    return conversation, created


async def list_user_conversations(
    principal: Principal,
    uow: UnitOfWork,
    *,
    cursor: str | None = None,
    limit: int = 20,
) -> list[ConversationSummary]:
    return await uow.conversations.list_summaries_for_user(
        principal.user_id, cursor=cursor, limit=limit,
    )


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    return assert_conversation_access(principal, conversation)
