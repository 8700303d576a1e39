from __future__ import annotations

from teamchat_realtime.domain.entities.identity import Identity
from teamchat_realtime.domain.value_objects.enums import UserStatus
from teamchat_realtime.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> Identity:
    return Identity(
        id=model.id,
        username=model.username,
        status=UserStatus(model.status),
    )
