"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from nearlink_chat.application.dto.conversation import ConversationKey
from nearlink_chat.application.dto.principal import Principal
from nearlink_chat.application.exceptions import AppError, ForbiddenError
from nearlink_chat.application.pagination import decode_cursor
from nearlink_chat.application.policies import rules
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.message import Message
from nearlink_chat.domain.entities.summary import ConversationSummary

ALICE = UUID("00000000-0000-0000-0000-00000000000a")
BOB = UUID("00000000-0000-0000-0000-00000000000b")
CAROL = UUID("00000000-0000-0000-0000-00000000000c")


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=ALICE)


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=BOB)


@pytest.fixture
def carol() -> Principal:
    return Principal(user_id=CAROL)


class FakeClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2025, 11, 7, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_conversation(
    *,
    participant_a: UUID = ALICE,
    participant_b: UUID = BOB,
    listing_id: UUID | None = None,
    request_id: UUID | None = None,
    conversation_id: UUID | None = None,
    last_activity_at: datetime | None = None,
) -> Conversation:
    now = datetime.now(timezone.utc)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        participant_a=participant_a,
        participant_b=participant_b,
        listing_id=listing_id,
        request_id=request_id,
        last_activity_at=last_activity_at or now,
        created_at=now,
    )


def make_message(
    *,
    conversation_id: UUID | None = None,
    sender_id: UUID = ALICE,
    content: str = "hello",
    created_at: datetime | None = None,
    read_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id or uuid.uuid4(),
        sender_id=sender_id,
        content=content,
        created_at=created_at or datetime.now(timezone.utc),
        read_at=read_at,
    )


# The fakes below filter and check rows with the same access rules the SQL
# repositories compile into their statements.


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)
    _message_reader: FakeMessageReader | None = None

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def find_by_key(self, key: ConversationKey, *, viewer_id: UUID) -> Conversation | None:
        for c in self._store.values():
            if (
                c.participant_a == key.participant_a
                and c.participant_b == key.participant_b
                and c.listing_id == key.listing_id
                and c.request_id == key.request_id
                and rules.can_read_conversation(viewer_id, c)
            ):
                return c
        return None

    async def list_summaries_for_user(
        self, user_id: UUID, *, cursor: str | None = None, limit: int = 20,
    ) -> list[ConversationSummary]:
        visible = [c for c in self._store.values() if rules.can_read_conversation(user_id, c)]
        visible.sort(key=lambda c: (c.last_activity_at, c.id), reverse=True)
        if cursor:
            ts, cid = decode_cursor(cursor)
            visible = [c for c in visible if (c.last_activity_at, c.id) < (ts, cid)]
        messages = self._message_reader._messages if self._message_reader else []
        summaries = []
        for c in visible[:limit]:
            own = sorted(
                (m for m in messages if m.conversation_id == c.id),
                key=lambda m: (m.created_at, m.id),
                reverse=True,
            )
            summaries.append(
                ConversationSummary(
                    conversation=c,
                    other_participant_id=c.other_participant(user_id),
                    last_message=own[0] if own else None,
                    unread_count=sum(
                        1 for m in own if m.sender_id != user_id and m.read_at is None
                    ),
                )
            )
        return summaries


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    touch_error: AppError | None = None

    async def create_if_not_exists(
        self, conversation: Conversation, *, viewer_id: UUID,
    ) -> tuple[Conversation, bool]:
        if not rules.can_insert_conversation(
            viewer_id, conversation.participant_a, conversation.participant_b,
        ):
            raise ForbiddenError("New conversation row violates access policy")
        key = ConversationKey(
            conversation.participant_a,
            conversation.participant_b,
            conversation.listing_id,
            conversation.request_id,
        )
        existing = await self._reader.find_by_key(key, viewer_id=viewer_id)
        if existing is not None:
            return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def touch_last_activity(self, conversation_id: UUID, ts: datetime, *, viewer_id: UUID) -> None:
        if self.touch_error is not None:
            raise self.touch_error
        conv = self._reader._store[conversation_id]
        if not rules.can_touch_conversation(viewer_id, conv):
            raise ForbiddenError("Conversation row is not updatable by this user")
        self._reader._store[conversation_id] = dataclasses.replace(conv, last_activity_at=ts)


@dataclass
class FakeMessageReader:
    _conversations: FakeConversationReader
    _messages: list[Message] = field(default_factory=list)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        for m in self._messages:
            if m.id == message_id:
                return m
        return None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        viewer_id: UUID,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        conv = self._conversations._store.get(conversation_id)
        if conv is None or not rules.can_read_message(viewer_id, conv):
            return []
        result = sorted(
            (m for m in self._messages if m.conversation_id == conversation_id),
            key=lambda m: (m.created_at, m.id),
            reverse=True,
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            result = [m for m in result if (m.created_at, m.id) < (ts, mid)]
        return result[:limit] if limit is not None else result


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message, *, viewer_id: UUID) -> Message:
        if not rules.can_insert_message(viewer_id, message):
            raise ForbiddenError("New message row violates access policy")
        self._reader._messages.append(message)
        return message

    async def mark_read(self, message_id: UUID, ts: datetime, *, viewer_id: UUID) -> Message:
        for i, m in enumerate(self._reader._messages):
            if m.id != message_id:
                continue
            conv = self._reader._conversations._store[m.conversation_id]
            if not rules.can_update_message(viewer_id, conv):
                break
            if m.read_at is None:
                m = dataclasses.replace(m, read_at=ts)
                self._reader._messages[i] = m
            return m
        raise ForbiddenError("Message row is not updatable by this user")

    async def mark_conversation_read(
        self, conversation_id: UUID, ts: datetime, *, viewer_id: UUID,
    ) -> int:
        conv = self._reader._conversations._store.get(conversation_id)
        if conv is None or not rules.can_update_message(viewer_id, conv):
            return 0
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.conversation_id == conversation_id and m.sender_id != viewer_id and m.read_at is None:
                self._reader._messages[i] = dataclasses.replace(m, read_at=ts)
                updated += 1
        return updated


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader | None = None
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages is None:
            self.messages = FakeMessageReader(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        self.conversations._message_reader = self.messages

    def add_conversation(self, conversation: Conversation) -> Conversation:
        self.conversations._store[conversation.id] = conversation
        return conversation

    def add_message(self, message: Message) -> Message:
        self.messages._messages.append(message)
        return message

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass
