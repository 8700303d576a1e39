from __future__ import annotations

from fastapi import APIRouter

from teamchat_realtime.api.deps import CurrentPrincipal, UoWDep
from teamchat_realtime.api.v1.schemas.unread import UnreadCountsResponse
from teamchat_realtime.services import unread_service

router = APIRouter(prefix="/api/v1", tags=["unread"])


@router.get("/unread-counts", response_model=UnreadCountsResponse)
async def get_unread_counts(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UnreadCountsResponse:
    counts = await unread_service.all_unread_counts(principal, uow)
    return UnreadCountsResponse.model_validate(counts.to_payload())
