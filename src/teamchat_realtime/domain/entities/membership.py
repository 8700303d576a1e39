from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from teamchat_realtime.domain.value_objects.enums import MemberRole


@dataclass(frozen=True, slots=True)
class Membership:
    team_id: UUID
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER
