"""Import all models so Alembic can discover them via Base.metadata."""
from nearlink_chat.infrastructure.db.models.conversation import ConversationModel
from nearlink_chat.infrastructure.db.models.message import MessageModel

__all__ = [
    "ConversationModel",
    "MessageModel",
]
