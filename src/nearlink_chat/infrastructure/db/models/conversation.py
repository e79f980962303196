from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from nearlink_chat.infrastructure.db.base import Base


class ConversationModel(Base):
    """Participant and listing/request columns reference tables owned by
    the identity and listing services; their foreign keys are declared in
    the migration only."""

    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    participant_a: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    participant_b: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    listing_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    request_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    last_activity_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    __table_args__ = (
        UniqueConstraint(
            "participant_a",
            "participant_b",
            "listing_id",
            "request_id",
            name="uq_conversations_tuple",
            postgresql_nulls_not_distinct=True,
        ),
        Index("ix_conversations_participant_a", "participant_a"),
        Index("ix_conversations_participant_b", "participant_b"),
        Index("ix_conversations_listing", "listing_id"),
        Index("ix_conversations_request", "request_id"),
        Index("ix_conversations_last_activity", last_activity_at.desc()),
    )
