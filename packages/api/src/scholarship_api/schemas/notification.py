# This project was developed with assistance from AI tools.
"""Notification request/response schemas."""

from datetime import datetime

from db.enums import NotificationPriority, NotificationType
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_type: NotificationType
    title: str
    message: str
    reference_id: str | None = None
    reference_type: str | None = None
    priority: NotificationPriority
    is_read: bool
    created_at: datetime
    read_at: datetime | None = None


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    unread_count: int
    pagination: Pagination


class BulkNotificationRequest(BaseModel):
    """Announcement sent by staff to a list of users."""

    user_ids: list[str] = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    priority: NotificationPriority = NotificationPriority.NORMAL


class MarkAllReadResponse(BaseModel):
    updated: int
