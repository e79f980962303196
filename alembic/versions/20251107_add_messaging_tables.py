"""Add conversations and messages tables

Revision ID: 20251107_add_messaging_tables
Revises:
Create Date: 2025-11-07 02:39:26.000000

Expects the ``profiles``, ``listings`` and ``requests`` tables of the
identity and listing services to exist already.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20251107_add_messaging_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "conversations",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "participant_a",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "participant_b",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "listing_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "request_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("requests.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "last_activity_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.UniqueConstraint(
            "participant_a",
            "participant_b",
            "listing_id",
            "request_id",
            name="uq_conversations_tuple",
            postgresql_nulls_not_distinct=True,
        ),
    )

    op.create_table(
        "messages",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "conversation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "sender_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("read_at", sa.TIMESTAMP(timezone=True), nullable=True),
    )

    op.create_index("ix_conversations_participant_a", "conversations", ["participant_a"])
    op.create_index("ix_conversations_participant_b", "conversations", ["participant_b"])
    op.create_index("ix_conversations_listing", "conversations", ["listing_id"])
    op.create_index("ix_conversations_request", "conversations", ["request_id"])
    op.create_index(
        "ix_conversations_last_activity",
        "conversations",
        [sa.text("last_activity_at DESC")],
    )
    op.create_index(
        "ix_messages_conversation_timeline",
        "messages",
        ["conversation_id", sa.text("created_at DESC"), sa.text("id DESC")],
    )
    op.create_index("ix_messages_sender", "messages", ["sender_id"])
    op.create_index("ix_messages_read_at", "messages", ["read_at"])


def downgrade() -> None:
    op.drop_index("ix_messages_read_at", table_name="messages")
    op.drop_index("ix_messages_sender", table_name="messages")
    op.drop_index("ix_messages_conversation_timeline", table_name="messages")
    op.drop_index("ix_conversations_last_activity", table_name="conversations")
    op.drop_index("ix_conversations_request", table_name="conversations")
    op.drop_index("ix_conversations_listing", table_name="conversations")
    op.drop_index("ix_conversations_participant_b", table_name="conversations")
    op.drop_index("ix_conversations_participant_a", table_name="conversations")
    op.drop_table("messages")
    op.drop_table("conversations")
