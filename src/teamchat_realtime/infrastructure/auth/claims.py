from __future__ import annotations

from typing import Any
from uuid import UUID

import jwt

from teamchat_realtime.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Tokens minted by the auth service carry the user id as `sub` (or legacy `id`)."""
    subject = payload.get("sub") or payload.get("id")
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    try:
        return Principal(user_id=UUID(str(subject)))
    except ValueError as exc:
        raise jwt.InvalidTokenError("Token subject is not a user id") from exc
