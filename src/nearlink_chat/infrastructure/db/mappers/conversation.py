from __future__ import annotations

from nearlink_chat.domain.entities.conversation import Conversation
from nearlink_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        participant_a=model.participant_a,
        participant_b=model.participant_b,
        listing_id=model.listing_id,
        request_id=model.request_id,
        last_activity_at=model.last_activity_at,
        created_at=model.created_at,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        participant_a=entity.participant_a,
        participant_b=entity.participant_b,
        listing_id=entity.listing_id,
        request_id=entity.request_id,
        last_activity_at=entity.last_activity_at,
        created_at=entity.created_at,
    )
