from __future__ import annotations

import logging
import uuid

import pytest

from nearlink_chat.application.exceptions import ForbiddenError, NotFoundError, StoreFailure
from nearlink_chat.services import message_service
from tests.conftest import ALICE, BOB, CAROL, FakeUoW, make_conversation, make_message


@pytest.fixture
def uow_with_conversation():
    uow = FakeUoW()
    conv = uow.add_conversation(make_conversation(participant_a=ALICE, participant_b=BOB))
    return uow, conv


@pytest.mark.asyncio
async def test_send_message_creates_message(alice, clock, uow_with_conversation):
    uow, conv = uow_with_conversation

    msg = await message_service.send_message(
        conv.id, ALICE, "hello", alice, uow, clock=clock,
    )

    assert msg.content == "hello"
    assert msg.conversation_id == conv.id
    assert msg.sender_id == ALICE
    assert msg.read_at is None
    assert uow._committed is True
    assert uow.messages._messages == [msg]


@pytest.mark.asyncio
async def test_send_message_bumps_last_activity(bob, clock, uow_with_conversation):
    uow, conv = uow_with_conversation

    msg = await message_service.send_message(conv.id, BOB, "hi", bob, uow, clock=clock)

    assert uow.conversations._store[conv.id].last_activity_at == msg.created_at


@pytest.mark.asyncio
async def test_send_message_survives_failed_activity_bump(alice, clock, uow_with_conversation, caplog):
    uow, conv = uow_with_conversation
    uow.conversations_w.touch_error = StoreFailure("conversation activity update failed")

    with caplog.at_level(logging.WARNING):
        msg = await message_service.send_message(
            conv.id, ALICE, "still delivered", alice, uow, clock=clock,
        )

    assert uow.messages._messages == [msg]
    assert uow._committed is True
    assert "last activity" in caplog.text


@pytest.mark.asyncio
async def test_send_message_survives_rejected_activity_bump(alice, clock, uow_with_conversation, caplog):
    uow, conv = uow_with_conversation
    uow.conversations_w.touch_error = ForbiddenError("Conversation row is not updatable by this user")

    with caplog.at_level(logging.WARNING):
        msg = await message_service.send_message(
            conv.id, ALICE, "delivered anyway", alice, uow, clock=clock,
        )

    assert uow.messages._messages == [msg]
    assert uow._committed is True
    assert uow.conversations._store[conv.id].last_activity_at == conv.last_activity_at
    assert "not updatable" in caplog.text


@pytest.mark.asyncio
async def test_send_message_forbidden_for_non_participant(carol, uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.send_message(conv.id, CAROL, "hi", carol, uow)

    assert uow.messages._messages == []


@pytest.mark.asyncio
async def test_send_message_forbidden_as_someone_else(alice, uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.send_message(conv.id, BOB, "spoofed", alice, uow)


@pytest.mark.asyncio
async def test_send_message_unknown_conversation(alice):
    with pytest.raises(NotFoundError):
        await message_service.send_message(uuid.uuid4(), ALICE, "hi", alice, FakeUoW())


@pytest.mark.asyncio
async def test_list_messages_newest_first(alice, bob, clock, uow_with_conversation):
    uow, conv = uow_with_conversation
    await message_service.send_message(conv.id, ALICE, "a", alice, uow, clock=clock)
    await message_service.send_message(conv.id, BOB, "b", bob, uow, clock=clock)
    await message_service.send_message(conv.id, ALICE, "c", alice, uow, clock=clock)

    result = await message_service.list_messages(conv.id, bob, uow)

    assert [m.content for m in result] == ["c", "b", "a"]


@pytest.mark.asyncio
async def test_list_messages_same_timestamp_order_is_stable(alice, uow_with_conversation):
    uow, conv = uow_with_conversation
    first = make_message(conversation_id=conv.id)
    for _ in range(4):
        uow.add_message(make_message(conversation_id=conv.id, created_at=first.created_at))

    once = await message_service.list_messages(conv.id, alice, uow)
    twice = await message_service.list_messages(conv.id, alice, uow)

    assert [m.id for m in once] == [m.id for m in twice]
    assert [m.id for m in once] == sorted((m.id for m in once), reverse=True)


@pytest.mark.asyncio
async def test_list_messages_forbidden_for_outsider(carol, uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.list_messages(conv.id, carol, uow)


@pytest.mark.asyncio
async def test_mark_read_by_second_participant(bob, clock, uow_with_conversation):
    uow, conv = uow_with_conversation
    msg = uow.add_message(make_message(conversation_id=conv.id, sender_id=ALICE))

    updated = await message_service.mark_read(msg.id, bob, uow, clock=clock)

    assert updated.id == msg.id
    assert updated.read_at is not None
    assert uow._committed is True


@pytest.mark.asyncio
async def test_mark_read_rejected_for_first_participant(alice, uow_with_conversation):
    """participant_a cannot mark read, even a message participant_b sent to them."""
    uow, conv = uow_with_conversation
    msg = uow.add_message(make_message(conversation_id=conv.id, sender_id=BOB))

    with pytest.raises(ForbiddenError):
        await message_service.mark_read(msg.id, alice, uow)

    assert uow.messages._messages[0].read_at is None


@pytest.mark.asyncio
async def test_mark_read_rejected_for_own_message(bob, uow_with_conversation):
    uow, conv = uow_with_conversation
    msg = uow.add_message(make_message(conversation_id=conv.id, sender_id=BOB))

    with pytest.raises(ForbiddenError):
        await message_service.mark_read(msg.id, bob, uow)


@pytest.mark.asyncio
async def test_mark_read_rejected_for_outsider(carol, uow_with_conversation):
    uow, conv = uow_with_conversation
    msg = uow.add_message(make_message(conversation_id=conv.id, sender_id=ALICE))

    with pytest.raises(ForbiddenError):
        await message_service.mark_read(msg.id, carol, uow)


@pytest.mark.asyncio
async def test_mark_read_unknown_message(bob):
    with pytest.raises(NotFoundError):
        await message_service.mark_read(uuid.uuid4(), bob, FakeUoW())


@pytest.mark.asyncio
async def test_mark_read_keeps_first_timestamp(bob, clock, uow_with_conversation):
    uow, conv = uow_with_conversation
    msg = uow.add_message(make_message(conversation_id=conv.id, sender_id=ALICE))

    first = await message_service.mark_read(msg.id, bob, uow, clock=clock)
    second = await message_service.mark_read(msg.id, bob, uow, clock=clock)

    assert second.read_at == first.read_at


@pytest.mark.asyncio
async def test_mark_conversation_read(bob, clock, uow_with_conversation):
    uow, conv = uow_with_conversation
    uow.add_message(make_message(conversation_id=conv.id, sender_id=ALICE))
    uow.add_message(make_message(conversation_id=conv.id, sender_id=ALICE))
    uow.add_message(make_message(conversation_id=conv.id, sender_id=BOB))

    updated = await message_service.mark_conversation_read(conv.id, bob, uow, clock=clock)

    assert updated == 2
    assert uow._committed is True
    unread = [m for m in uow.messages._messages if m.read_at is None]
    assert [m.sender_id for m in unread] == [BOB]


@pytest.mark.asyncio
async def test_mark_conversation_read_rejected_for_first_participant(alice, uow_with_conversation):
    uow, conv = uow_with_conversation
    uow.add_message(make_message(conversation_id=conv.id, sender_id=BOB))

    with pytest.raises(ForbiddenError):
        await message_service.mark_conversation_read(conv.id, alice, uow)
