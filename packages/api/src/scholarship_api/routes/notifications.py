# This project was developed with assistance from AI tools.
"""Notification inbox routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import BulkResult, Pagination
from ..schemas.notification import (
    BulkNotificationRequest,
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from ..services import notification as notification_service

router = APIRouter()

_ALL_ROLES = (UserRole.ADMIN, UserRole.OFFICER, UserRole.STUDENT)


@router.get(
    "/",
    response_model=NotificationListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    unread_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    """The caller's notifications, newest first."""
    notifications, total, unread = await notification_service.list_notifications(
        session, user, unread_only=unread_only, offset=offset, limit=limit
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread,
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.post(
    "/read-all",
    response_model=MarkAllReadResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def mark_all_read(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await notification_service.mark_all_read(session, user))


@router.post(
    "/bulk",
    response_model=BulkResult,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.OFFICER))],
)
async def send_bulk(
    body: BulkNotificationRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    """Send an announcement to many users. Admins and officers only."""
    return await notification_service.send_bulk(
        session,
        user,
        user_ids=body.user_ids,
        title=body.title,
        message=body.message,
        priority=body.priority,
    )


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def mark_read(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await notification_service.mark_read(session, user, notification_id)
    return NotificationResponse.model_validate(notification)
