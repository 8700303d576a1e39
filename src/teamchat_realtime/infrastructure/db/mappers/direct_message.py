from __future__ import annotations

from teamchat_realtime.domain.entities.direct_message import DirectMessage
from teamchat_realtime.infrastructure.db.models.direct_message import DirectMessageModel


def model_to_entity(model: DirectMessageModel) -> DirectMessage:
    return DirectMessage(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        text=model.text,
        image_ref=model.image_ref,
        read=model.read,
        created_at=model.created_at,
    )


def entity_to_model(entity: DirectMessage) -> DirectMessageModel:
    return DirectMessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        text=entity.text,
        image_ref=entity.image_ref,
        read=entity.read,
        created_at=entity.created_at,
    )
