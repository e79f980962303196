from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nearlink_chat.application.exceptions import ForbiddenError
from nearlink_chat.application.pagination import decode_cursor
from nearlink_chat.domain.entities.message import Message
from nearlink_chat.infrastructure.db import row_security
from nearlink_chat.infrastructure.db.errors import store_errors
from nearlink_chat.infrastructure.db.mappers import message as mapper
from nearlink_chat.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        with store_errors("message lookup"):
            result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        viewer_id: UUID,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                row_security.message_visible(viewer_id),
            )
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (MessageModel.created_at < ts)
                | ((MessageModel.created_at == ts) & (MessageModel.id < mid))
            )
        with store_errors("message listing"):
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message, *, viewer_id: UUID) -> Message:
        row_security.check_message_insert(viewer_id, message)
        model = mapper.entity_to_model(message)
        self._session.add(model)
        with store_errors("message insert"):
            await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(
        self,
        message_id: UUID,
        ts: datetime,
        *,
        viewer_id: UUID,
    ) -> Message:
        # read_at only moves from NULL to a timestamp, never again
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.id == message_id,
                row_security.message_updatable(viewer_id),
            )
            .values(read_at=func.coalesce(MessageModel.read_at, ts))
            .returning(MessageModel)
            .execution_options(synchronize_session="fetch")
        )
        with store_errors("message read update"):
            result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise ForbiddenError("Message row is not updatable by this user")
        return mapper.model_to_entity(row)

    async def mark_conversation_read(
        self,
        conversation_id: UUID,
        ts: datetime,
        *,
        viewer_id: UUID,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.sender_id != viewer_id,
                MessageModel.read_at.is_(None),
                row_security.message_updatable(viewer_id),
            )
            .values(read_at=ts)
            .execution_options(synchronize_session=False)
        )
        with store_errors("conversation read update"):
            result = await self._session.execute(stmt)
        return result.rowcount
