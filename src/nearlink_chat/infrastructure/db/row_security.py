"""SQL renditions of the access rules in ``application.policies.rules``.

Repositories attach these to every statement they issue, the way a
row-level security policy would: SELECT and UPDATE only ever see rows the
viewer is allowed to touch, and INSERTs are checked before they are sent.
This holds even when the calling service skipped its own checks.
"""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import ColumnElement, exists, or_

from nearlink_chat.application.exceptions import ForbiddenError
from nearlink_chat.application.policies import rules
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.message import Message
from nearlink_chat.infrastructure.db.models.conversation import ConversationModel
from nearlink_chat.infrastructure.db.models.message import MessageModel


def conversation_visible(viewer_id: UUID) -> ColumnElement[bool]:
    return or_(
        ConversationModel.participant_a == viewer_id,
        ConversationModel.participant_b == viewer_id,
    )


def message_visible(viewer_id: UUID) -> ColumnElement[bool]:
    return exists().where(
        ConversationModel.id == MessageModel.conversation_id,
        conversation_visible(viewer_id),
    )


def message_updatable(viewer_id: UUID) -> ColumnElement[bool]:
    return exists().where(
        ConversationModel.id == MessageModel.conversation_id,
        ConversationModel.participant_b == viewer_id,
    )


def check_conversation_insert(viewer_id: UUID, conversation: Conversation) -> None:
    if not rules.can_insert_conversation(
        viewer_id, conversation.participant_a, conversation.participant_b,
    ):
        raise ForbiddenError("New conversation row violates access policy")


def check_message_insert(viewer_id: UUID, message: Message) -> None:
    if not rules.can_insert_message(viewer_id, message):
        raise ForbiddenError("New message row violates access policy")
