# This project was developed with assistance from AI tools.
"""In-app notification service.

``notify`` runs after the core transaction has committed, in its own
session. A failed notification is logged and dropped; it never rolls back
or fails the operation that triggered it.
"""

import logging
from datetime import UTC, datetime

from db import Notification
from db.database import SessionLocal
from db.enums import NotificationPriority, NotificationType
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import require_staff
from ..core.config import settings
from ..core.errors import NotFoundError, ValidationError
from ..schemas import BulkItemResult, BulkResult
from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


async def notify(
    *,
    user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    reference_id: str | int | None = None,
    reference_type: str | None = None,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> None:
    """Persist a notification for ``user_id``. Best effort."""
    try:
        async with SessionLocal() as session:
            session.add(
                Notification(
                    user_id=user_id,
                    notification_type=notification_type,
                    title=title,
                    message=message,
                    reference_id=str(reference_id) if reference_id is not None else None,
                    reference_type=reference_type,
                    priority=priority,
                )
            )
            await session.commit()
    except Exception:
        logger.warning(
            "Failed to deliver %s notification to user %s",
            notification_type.value,
            user_id,
            exc_info=True,
        )


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int, int]:
    """Return the caller's notifications, newest first.

    Returns:
        (notifications, total matching, unread count)
    """
    base = select(Notification).where(Notification.user_id == user.student_identity)
    if unread_only:
        base = base.where(Notification.is_read.is_(False))

    total = (
        await session.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0
    unread = (
        await session.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user.student_identity,
                Notification.is_read.is_(False),
            )
        )
    ).scalar() or 0

    stmt = base.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total, unread


async def mark_read(
    session: AsyncSession,
    user: UserContext,
    notification_id: int,
) -> Notification:
    """Mark one of the caller's notifications as read."""
    stmt = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user.student_identity,
    )
    notification = (await session.execute(stmt)).scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(UTC)
        await session.commit()
    return notification


async def mark_all_read(session: AsyncSession, user: UserContext) -> int:
    """Mark every unread notification of the caller as read. Returns the count."""
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user.student_identity, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    await session.commit()
    return result.rowcount


async def send_bulk(
    session: AsyncSession,
    user: UserContext,
    *,
    user_ids: list[str],
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> BulkResult:
    """Send an announcement to many users, one savepoint per recipient."""
    require_staff(user, "send_bulk_notifications")
    if len(user_ids) > settings.BULK_MAX_ITEMS:
        raise ValidationError(
            "Too many recipients",
            [f"At most {settings.BULK_MAX_ITEMS} recipients per request"],
        )

    results: list[BulkItemResult] = []
    for recipient in dict.fromkeys(user_ids):
        try:
            async with session.begin_nested():
                session.add(
                    Notification(
                        user_id=recipient,
                        notification_type=NotificationType.ANNOUNCEMENT,
                        title=title,
                        message=message,
                        priority=priority,
                    )
                )
                await session.flush()
        except SQLAlchemyError:
            logger.warning("Bulk notification to %s failed", recipient, exc_info=True)
            results.append(BulkItemResult(item_id=recipient, success=False, error="Delivery failed"))
            continue
        results.append(BulkItemResult(item_id=recipient, success=True))

    await session.commit()
    outcome = BulkResult.from_items(results)
    logger.info(
        "Bulk notification by %s: %d sent, %d failed",
        user.user_id,
        outcome.succeeded,
        outcome.failed,
    )
    return outcome
