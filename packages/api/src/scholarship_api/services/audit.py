# This project was developed with assistance from AI tools.
"""Audit event service.

Writes append-only workflow trail entries. Events are added to the caller's
session so they commit (or roll back) together with the change they record.
"""

import logging

from db import AuditEvent
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


async def write_audit_event(
    session: AsyncSession,
    *,
    event_type: str,
    user: UserContext | None = None,
    application_id: int | None = None,
    allocation_id: int | None = None,
    event_data: dict | None = None,
) -> AuditEvent:
    """Add a single audit event to the current transaction.

    Args:
        session: Database session.
        event_type: Event category (e.g. 'application_submitted').
        user: Caller who triggered the event, if any.
        application_id: Related application, if any.
        allocation_id: Related allocation, if any.
        event_data: Arbitrary JSON-serializable event payload.

    Returns:
        The created AuditEvent row.
    """
    audit = AuditEvent(
        event_type=event_type,
        user_id=user.user_id if user else None,
        user_role=user.role.value if user else None,
        application_id=application_id,
        allocation_id=allocation_id,
        event_data=event_data,
    )
    session.add(audit)
    await session.flush()
    logger.debug("Audit event %s recorded for application %s", event_type, application_id)
    return audit


async def get_events_for_application(
    session: AsyncSession,
    application_id: int,
) -> list[AuditEvent]:
    """Return the audit trail of one application, oldest first."""
    stmt = (
        select(AuditEvent)
        .where(AuditEvent.application_id == application_id)
        .order_by(AuditEvent.timestamp.asc(), AuditEvent.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
