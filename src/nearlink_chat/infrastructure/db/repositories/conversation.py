from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from nearlink_chat.application.dto.conversation import ConversationKey
from nearlink_chat.application.exceptions import ForbiddenError
from nearlink_chat.application.pagination import decode_cursor
from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.domain.entities.summary import ConversationSummary
from nearlink_chat.infrastructure.db import row_security
from nearlink_chat.infrastructure.db.errors import store_errors
from nearlink_chat.infrastructure.db.mappers import conversation as mapper
from nearlink_chat.infrastructure.db.mappers import message as message_mapper
from nearlink_chat.infrastructure.db.models.conversation import ConversationModel
from nearlink_chat.infrastructure.db.models.message import MessageModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        with store_errors("conversation lookup"):
            result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def find_by_key(
        self,
        key: ConversationKey,
        *,
        viewer_id: UUID,
    ) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.participant_a == key.participant_a,
                ConversationModel.participant_b == key.participant_b,
                ConversationModel.listing_id.is_not_distinct_from(key.listing_id),
                ConversationModel.request_id.is_not_distinct_from(key.request_id),
                row_security.conversation_visible(viewer_id),
            )
            .order_by(ConversationModel.created_at.asc())
            .limit(1)
        )
        with store_errors("conversation lookup"):
            result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_summaries_for_user(
        self,
        user_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[ConversationSummary]:
        stmt = (
            select(ConversationModel)
            .where(row_security.conversation_visible(user_id))
            .order_by(
                ConversationModel.last_activity_at.desc(),
                ConversationModel.id.desc(),
            )
            .limit(limit)
        )
        if cursor:
            ts, cid = decode_cursor(cursor)
            stmt = stmt.where(
                (ConversationModel.last_activity_at < ts)
                | (
                    (ConversationModel.last_activity_at == ts)
                    & (ConversationModel.id < cid)
                )
            )
        with store_errors("conversation listing"):
            result = await self._session.execute(stmt)
            conversations = [mapper.model_to_entity(m) for m in result.scalars().all()]
            if not conversations:
                return []
            ids = [c.id for c in conversations]

            last_stmt = (
                select(MessageModel)
                .where(MessageModel.conversation_id.in_(ids))
                .distinct(MessageModel.conversation_id)
                .order_by(
                    MessageModel.conversation_id,
                    MessageModel.created_at.desc(),
                    MessageModel.id.desc(),
                )
            )
            last_rows = (await self._session.execute(last_stmt)).scalars().all()

            unread_stmt = (
                select(MessageModel.conversation_id, func.count())
                .where(
                    MessageModel.conversation_id.in_(ids),
                    MessageModel.sender_id != user_id,
                    MessageModel.read_at.is_(None),
                )
                .group_by(MessageModel.conversation_id)
            )
            unread_rows = (await self._session.execute(unread_stmt)).all()

        last_by_conv = {
            m.conversation_id: message_mapper.model_to_entity(m) for m in last_rows
        }
        unread_by_conv = {cid: count for cid, count in unread_rows}
        return [
            ConversationSummary(
                conversation=c,
                other_participant_id=c.other_participant(user_id),
                last_message=last_by_conv.get(c.id),
                unread_count=unread_by_conv.get(c.id, 0),
            )
            for c in conversations
        ]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(
        self,
        conversation: Conversation,
        *,
        viewer_id: UUID,
    ) -> tuple[Conversation, bool]:
        """Insert conversation idempotently. Returns (conversation, created_flag)."""
        row_security.check_conversation_insert(viewer_id, conversation)
        stmt = (
            pg_insert(ConversationModel)
            .values(
                id=conversation.id,
                participant_a=conversation.participant_a,
                participant_b=conversation.participant_b,
                listing_id=conversation.listing_id,
                request_id=conversation.request_id,
                last_activity_at=conversation.last_activity_at,
                created_at=conversation.created_at,
            )
            .on_conflict_do_nothing(constraint="uq_conversations_tuple")
            .returning(ConversationModel)
        )
        with store_errors("conversation insert"):
            result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Conflict: a concurrent first contact won the insert
        reader = ConversationReaderRepo(self._session)
        existing = await reader.find_by_key(
            ConversationKey(
                conversation.participant_a,
                conversation.participant_b,
                conversation.listing_id,
                conversation.request_id,
            ),
            viewer_id=viewer_id,
        )
        assert existing is not None
        return existing, False

    async def touch_last_activity(
        self,
        conversation_id: UUID,
        ts: datetime,
        *,
        viewer_id: UUID,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(
                ConversationModel.id == conversation_id,
                row_security.conversation_visible(viewer_id),
            )
            .values(last_activity_at=ts)
            .execution_options(synchronize_session=False)
        )
        # Savepoint so a failure here leaves the enclosing message insert intact
        with store_errors("conversation activity update"):
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ForbiddenError("Conversation row is not updatable by this user")
