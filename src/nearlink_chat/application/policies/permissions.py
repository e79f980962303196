from __future__ import annotations

from uuid import UUID

from nearlink_chat.application.dto.principal import Principal
from nearlink_chat.application.exceptions import ForbiddenError, NotFoundError
from nearlink_chat.application.policies import rules
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.message import Message


def assert_conversation_access(
    principal: Principal,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or principal has no access."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if not rules.can_read_conversation(principal.user_id, conversation):
        raise ForbiddenError("Not a participant of this conversation")

    return conversation


def assert_can_open_conversation(
    principal: Principal,
    participant_a: UUID,
    participant_b: UUID,
) -> None:
    if not rules.can_insert_conversation(principal.user_id, participant_a, participant_b):
        raise ForbiddenError("Cannot open a conversation on behalf of other users")


def assert_can_send(
    principal: Principal,
    conversation: Conversation | None,
    sender_id: UUID,
) -> Conversation:
    """The caller must be the sender, and the sender must be a participant."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if principal.user_id != sender_id:
        raise ForbiddenError("Messages can only be sent as yourself")

    if not conversation.has_participant(sender_id):
        raise ForbiddenError("Not a participant of this conversation")

    return conversation


def assert_can_mark_read(
    principal: Principal,
    conversation: Conversation | None,
    message: Message | None,
) -> tuple[Conversation, Message]:
    if message is None or conversation is None:
        raise NotFoundError("Message not found")

    if not rules.can_read_message(principal.user_id, conversation):
        raise ForbiddenError("Not a participant of this conversation")

    if principal.user_id == message.sender_id:
        raise ForbiddenError("Senders cannot mark their own messages read")

    if not rules.can_update_message(principal.user_id, conversation):
        raise ForbiddenError("Only the recipient participant can mark messages read")

    return conversation, message


def assert_can_mark_conversation_read(
    principal: Principal,
    conversation: Conversation | None,
) -> Conversation:
    conversation = assert_conversation_access(principal, conversation)
    if not rules.can_update_message(principal.user_id, conversation):
        raise ForbiddenError("Only the recipient participant can mark messages read")
    return conversation
