from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from teamchat_realtime.api.deps import CurrentPrincipal, UoWDep
from teamchat_realtime.api.v1.schemas.notification import NotificationResponse
from teamchat_realtime.services import notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    principal: CurrentPrincipal,
    uow: UoWDep,
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
) -> list[NotificationResponse]:
    notifications = await notification_service.list_notifications(
        principal, unread_only, limit, uow,
    )
    return [NotificationResponse.model_validate(n, from_attributes=True) for n in notifications]


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_notification_read(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> Response:
    await notification_service.mark_notification_read(notification_id, principal, uow)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
