"""Seed development data: opens a conversation between two existing profiles.

Usage: python -m nearlink_chat.scripts.seed_dev_data <user_a_uuid> <user_b_uuid> [--listing <uuid>]
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import uuid

from nearlink_chat.application.dto.principal import Principal
from nearlink_chat.infrastructure.db.session import AsyncSessionLocal
from nearlink_chat.infrastructure.db.uow import SqlAlchemyUoW
from nearlink_chat.services import conversation_service, message_service

logger = logging.getLogger(__name__)


async def seed(user_a: uuid.UUID, user_b: uuid.UUID, listing_id: uuid.UUID | None) -> None:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        alice = Principal(user_id=user_a)
        bob = Principal(user_id=user_b)

        conv, created = await conversation_service.resolve_or_create(
            user_a, user_b, alice, uow, listing_id=listing_id,
        )

        messages_data = [
            (alice, "Hi! Is this still available?"),
            (bob, "Yes, it is. When would you like to pick it up?"),
            (alice, "Tomorrow afternoon works for me."),
        ]
        for sender, content in messages_data:
            await message_service.send_message(
                conv.id, sender.user_id, content, sender, uow,
            )

        logger.info(
            "Seeded conversation %s (created=%s) with %d messages",
            conv.id,
            created,
            len(messages_data),
        )


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_a", type=uuid.UUID)
    parser.add_argument("user_b", type=uuid.UUID)
    parser.add_argument("--listing", type=uuid.UUID, default=None)
    args = parser.parse_args()
    asyncio.run(seed(args.user_a, args.user_b, args.listing))


if __name__ == "__main__":
    main()
