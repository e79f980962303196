"""Row-level access rules for conversations and messages.

Every predicate takes the caller's user id plus the owner fields of the row
being touched and returns a bool. They are the single source of truth for
who may see or change what; the service asserts in ``permissions`` and the
row filters in the storage layer are both built from them.

| Resource     | read                     | insert             | update              |
|--------------|--------------------------|--------------------|---------------------|
| conversation | caller in {a, b}         | caller in {a, b}   | caller in {a, b}    |
| message      | caller in {a, b} of conv | caller == sender   | caller == b of conv |

The message update rule names ``participant_b`` only. A message sent by
``participant_b`` can therefore never be marked read by ``participant_a``.
"""
from __future__ import annotations

from uuid import UUID

from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.message import Message


def can_read_conversation(user_id: UUID, conversation: Conversation) -> bool:
    return conversation.has_participant(user_id)


def can_insert_conversation(
    user_id: UUID, participant_a: UUID, participant_b: UUID,
) -> bool:
    return user_id in (participant_a, participant_b)


def can_touch_conversation(user_id: UUID, conversation: Conversation) -> bool:
    """Only the activity timestamp is ever updated; same owners as read."""
    return conversation.has_participant(user_id)


def can_read_message(user_id: UUID, conversation: Conversation) -> bool:
    return conversation.has_participant(user_id)


def can_insert_message(user_id: UUID, message: Message) -> bool:
    return user_id == message.sender_id


def can_update_message(user_id: UUID, conversation: Conversation) -> bool:
    return user_id == conversation.participant_b
