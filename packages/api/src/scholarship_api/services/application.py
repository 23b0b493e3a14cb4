# This project was developed with assistance from AI tools.
"""Application lifecycle service.

Creation, submission, staff review, completion and deletion of scholarship
applications. Every status change is a conditional UPDATE keyed by the
status the caller read, so two concurrent requests can never both move the
same application: the loser matches zero rows and gets a ConflictError.

Students see and act on their own applications only; staff see all.
"""

import logging
from datetime import UTC, datetime, timedelta

from db import Allocation, Application, InterviewBooking, Scholarship
from db.database import retry_read
from db.enums import (
    AllocationStatus,
    ApplicationStatus,
    BookingStatus,
    NotificationPriority,
    NotificationType,
    UserRole,
)
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.auth import ensure_owner, require_staff
from ..core.config import settings
from ..core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    QuotaExhaustedError,
    ValidationError,
)
from ..schemas.auth import UserContext
from .audit import write_audit_event
from .completeness import missing_requirements
from .ledger import SlotLedger
from .notification import notify
from .scope import apply_student_scope

logger = logging.getLogger(__name__)

_OPEN_STATUSES = ApplicationStatus.open_statuses()

SECTION_LOADS = (
    selectinload(Application.personal_info),
    selectinload(Application.addresses),
    selectinload(Application.education_history),
    selectinload(Application.family_members),
    selectinload(Application.financial_info),
    selectinload(Application.assets),
    selectinload(Application.activities),
    selectinload(Application.references),
    selectinload(Application.documents),
)

# Review outcome -> (notification type, priority, title)
_REVIEW_NOTICES = {
    ApplicationStatus.APPROVED: (
        NotificationType.APPLICATION_APPROVED,
        NotificationPriority.HIGH,
        "Your application was approved",
    ),
    ApplicationStatus.REJECTED: (
        NotificationType.APPLICATION_REJECTED,
        NotificationPriority.HIGH,
        "Your application was not approved",
    ),
    ApplicationStatus.INTERVIEW_SCHEDULED: (
        NotificationType.INTERVIEW_SCHEDULED,
        NotificationPriority.HIGH,
        "Interview scheduled",
    ),
}


def reference_number(application_id: int, when: datetime) -> str:
    """Human-facing reference, e.g. ``SCH-2026-000042``."""
    return f"{settings.REFERENCE_PREFIX}-{when.year}-{application_id:06d}"


def _transition_error(current: ApplicationStatus, target: ApplicationStatus) -> InvalidTransitionError:
    allowed = ApplicationStatus.valid_transitions().get(current, frozenset())
    return InvalidTransitionError(
        f"Cannot transition from '{current.value}' to '{target.value}'. "
        f"Allowed: {sorted(s.value for s in allowed) if allowed else 'none (terminal status)'}."
    )


async def load_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    action: str = "view",
    with_sections: bool = False,
    for_update: bool = False,
) -> Application:
    """Fetch one application and check the caller may act on it.

    Raises NotFoundError for unknown ids and ForbiddenError when a student
    addresses another student's application.
    """
    stmt = select(Application).where(Application.id == application_id)
    if with_sections:
        stmt = stmt.options(*SECTION_LOADS)
    if for_update:
        stmt = stmt.with_for_update()
    application = (await session.execute(stmt)).scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    ensure_owner(user, application.student_id, action)
    return application


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application:
    """Return one application with its sections, if visible to the caller."""

    async def _read() -> Application:
        return await load_application(session, user, application_id, with_sections=True)

    return await retry_read(_read, session=session)


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    filter_status: ApplicationStatus | None = None,
    scholarship_id: int | None = None,
) -> tuple[list[Application], int]:
    """Return applications visible to the current user, newest first."""

    def _filters(stmt):
        stmt = apply_student_scope(stmt, user)
        if filter_status is not None:
            stmt = stmt.where(Application.status == filter_status)
        if scholarship_id is not None:
            stmt = stmt.where(Application.scholarship_id == scholarship_id)
        return stmt

    async def _read() -> tuple[list[Application], int]:
        total = (await session.execute(_filters(select(func.count(Application.id))))).scalar() or 0
        stmt = (
            _filters(select(Application))
            .order_by(Application.created_at.desc(), Application.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    return await retry_read(_read, session=session)


async def create_application(
    session: AsyncSession,
    user: UserContext,
    scholarship_id: int,
    application_data: dict | None = None,
) -> Application:
    """Open a draft application for the calling student.

    The scholarship must be active, inside its application window and have
    quota left, and the student must not hold another open application for
    it. Quota is not reserved here; only an allocation consumes quota.
    """
    if UserRole.STUDENT not in ({user.role} | user.roles):
        raise ForbiddenError("Only students can create applications")

    scholarship = await session.get(Scholarship, scholarship_id)
    if scholarship is None:
        raise NotFoundError("Scholarship not found")
    if not scholarship.is_active:
        raise ConflictError("Scholarship is not accepting applications")

    now = datetime.now(UTC)
    if not (scholarship.application_start_date <= now <= scholarship.application_end_date):
        raise ConflictError("Scholarship is outside its application period")
    if scholarship.available_quota <= 0:
        raise QuotaExhaustedError("No quota remaining for this scholarship")

    student_id = user.student_identity
    duplicate = await session.execute(
        select(Application.id).where(
            Application.student_id == student_id,
            Application.scholarship_id == scholarship_id,
            Application.status.in_(_OPEN_STATUSES),
        )
    )
    if duplicate.first() is not None:
        raise ConflictError("You already have an open application for this scholarship")

    application = Application(
        student_id=student_id,
        scholarship_id=scholarship_id,
        status=ApplicationStatus.DRAFT,
        application_data=application_data,
        terms_accepted=False,
    )
    session.add(application)
    try:
        await session.flush()
        await write_audit_event(
            session,
            event_type="application_created",
            user=user,
            application_id=application.id,
            event_data={"scholarship_id": scholarship_id},
        )
        await session.commit()
    except IntegrityError as exc:
        # Partial unique index caught a concurrent duplicate.
        await session.rollback()
        raise ConflictError("You already have an open application for this scholarship") from exc

    logger.info("Application %s created by %s for scholarship %s", application.id, student_id, scholarship_id)
    return application


async def submit_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    terms_accepted: bool,
    declaration_accepted: bool,
) -> Application:
    """Move an application from draft to submitted.

    The application row stays locked from the completeness check until the
    commit, so a concurrent section edit waits for the submit (and then sees
    a non-draft application) or finishes before the sections are read.

    Raises ValidationError listing every missing requirement, or
    ConflictError when the application left draft in the meantime.
    """
    application = await load_application(
        session, user, application_id, action="submit", with_sections=True, for_update=True
    )
    if application.status != ApplicationStatus.DRAFT:
        error = _transition_error(application.status, ApplicationStatus.SUBMITTED)
        await session.rollback()
        raise error

    scholarship = await session.get(Scholarship, application.scholarship_id)
    errors = missing_requirements(
        application,
        scholarship,
        terms_accepted=terms_accepted,
        declaration_accepted=declaration_accepted,
    )
    if errors:
        await session.rollback()
        raise ValidationError("Application is incomplete", errors)

    now = datetime.now(UTC)
    reference = reference_number(application.id, now)
    result = await session.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.status == ApplicationStatus.DRAFT,
        )
        .values(
            status=ApplicationStatus.SUBMITTED,
            submitted_at=now,
            reference_number=reference,
            terms_accepted=True,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        logger.info("Submit lost race on application %s", application_id)
        raise ConflictError("Application has already been submitted")

    await write_audit_event(
        session,
        event_type="application_submitted",
        user=user,
        application_id=application_id,
        event_data={"reference_number": reference},
    )
    await session.commit()

    await session.refresh(application)
    logger.info("Application %s submitted (%s)", application_id, reference)

    await notify(
        user_id=application.student_id,
        notification_type=NotificationType.APPLICATION_SUBMITTED,
        title="Application submitted",
        message=f"Your application {reference} was received and is awaiting review.",
        reference_id=application_id,
        reference_type="application",
    )
    return application


async def _cancel_open_booking(session: AsyncSession, application_id: int) -> int | None:
    """Cancel the application's booked or confirmed interview and free its seat.

    Returns the slot whose seat was released, or None when nothing was booked.
    """
    slot_id = (
        await session.execute(
            update(InterviewBooking)
            .where(
                InterviewBooking.application_id == application_id,
                InterviewBooking.booking_status.in_(BookingStatus.active_statuses()),
            )
            .values(
                booking_status=BookingStatus.CANCELLED,
                cancelled_at=datetime.now(UTC),
                cancellation_reason="Application rejected",
            )
            .returning(InterviewBooking.slot_id)
            .execution_options(synchronize_session=False)
        )
    ).scalar_one_or_none()
    if slot_id is not None:
        await SlotLedger(session).release(slot_id)
        logger.info("Released interview seat of rejected application %s", application_id)
    return slot_id


async def review_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    *,
    new_status: ApplicationStatus,
    review_notes: str | None = None,
) -> Application:
    """Record a staff review decision and move the application.

    Raises InvalidTransitionError when ``new_status`` is not reachable from
    the current status, ConflictError when another reviewer moved the
    application first.
    """
    require_staff(user, "review_application")
    application = await load_application(session, user, application_id, action="review")

    current = application.status
    allowed = ApplicationStatus.valid_transitions().get(current, frozenset())
    if new_status not in ApplicationStatus.review_targets() or new_status not in allowed:
        raise _transition_error(current, new_status)

    now = datetime.now(UTC)
    values = {"status": new_status, "reviewer_id": user.user_id, "reviewed_at": now}
    if review_notes is not None:
        values["review_notes"] = review_notes

    result = await session.execute(
        update(Application)
        .where(Application.id == application_id, Application.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        logger.info(
            "Review lost race on application %s (expected status %s)", application_id, current.value
        )
        raise ConflictError("Application status changed during review; reload and retry")

    if current == ApplicationStatus.INTERVIEW_SCHEDULED and new_status == ApplicationStatus.REJECTED:
        try:
            await _cancel_open_booking(session, application_id)
        except Exception:
            await session.rollback()
            raise

    await write_audit_event(
        session,
        event_type="application_reviewed",
        user=user,
        application_id=application_id,
        event_data={"from": current.value, "to": new_status.value},
    )
    await session.commit()

    await session.refresh(application)
    logger.info(
        "Application %s: %s -> %s by %s", application_id, current.value, new_status.value, user.user_id
    )

    notice_type, priority, title = _REVIEW_NOTICES.get(
        new_status,
        (NotificationType.APPLICATION_REVIEWED, NotificationPriority.NORMAL, "Application status updated"),
    )
    await notify(
        user_id=application.student_id,
        notification_type=notice_type,
        title=title,
        message=f"Your application is now '{new_status.value.replace('_', ' ')}'.",
        reference_id=application_id,
        reference_type="application",
        priority=priority,
    )
    return application


async def complete_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> Application:
    """Close an approved application whose allocation has been disbursed."""
    require_staff(user, "complete_application")
    application = await load_application(session, user, application_id, action="complete")
    if application.status != ApplicationStatus.APPROVED:
        raise _transition_error(application.status, ApplicationStatus.COMPLETED)

    allocation_status = (
        await session.execute(
            select(Allocation.allocation_status).where(Allocation.application_id == application_id)
        )
    ).scalar_one_or_none()
    if allocation_status != AllocationStatus.DISBURSED:
        raise ConflictError("Funds must be disbursed before the application can be completed")

    result = await session.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.status == ApplicationStatus.APPROVED,
        )
        .values(status=ApplicationStatus.COMPLETED)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await session.rollback()
        raise ConflictError("Application status changed; reload and retry")

    await write_audit_event(
        session,
        event_type="application_completed",
        user=user,
        application_id=application_id,
    )
    await session.commit()
    await session.refresh(application)
    logger.info("Application %s completed", application_id)
    return application


async def delete_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> None:
    """Delete an application.

    Students may delete their own drafts only. Staff may delete in any
    status unless funds were allocated.
    """
    application = await load_application(session, user, application_id, action="delete")

    stmt = (
        delete(Application)
        .where(Application.id == application_id)
        .execution_options(synchronize_session=False)
    )
    if user.is_staff:
        has_allocation = (
            await session.execute(
                select(Allocation.id).where(Allocation.application_id == application_id)
            )
        ).first()
        if has_allocation is not None:
            raise ConflictError("Applications with an allocation cannot be deleted")
    else:
        if application.status != ApplicationStatus.DRAFT:
            raise ConflictError("Only draft applications can be deleted")
        stmt = stmt.where(Application.status == ApplicationStatus.DRAFT)

    try:
        result = await session.execute(stmt)
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(
            "Applications with an allocation or interview booking cannot be deleted"
        ) from exc
    if result.rowcount == 0:
        await session.rollback()
        raise ConflictError("Only draft applications can be deleted")

    await write_audit_event(
        session,
        event_type="application_deleted",
        user=user,
        application_id=application_id,
        event_data={"status": application.status.value},
    )
    await session.commit()
    logger.info("Application %s deleted by %s", application_id, user.user_id)


async def application_stats(session: AsyncSession, user: UserContext) -> dict:
    """Counts per status plus submitted applications overdue for review."""
    require_staff(user, "application_stats")
    cutoff = datetime.now(UTC) - timedelta(days=settings.OVERDUE_REVIEW_DAYS)

    async def _read() -> dict:
        rows = await session.execute(
            select(Application.status, func.count(Application.id)).group_by(Application.status)
        )
        by_status = {status.value: 0 for status in ApplicationStatus}
        for status, count in rows.all():
            by_status[ApplicationStatus(status).value] = count

        overdue = (
            await session.execute(
                select(func.count(Application.id)).where(
                    Application.status == ApplicationStatus.SUBMITTED,
                    Application.submitted_at < cutoff,
                )
            )
        ).scalar() or 0
        return {"total": sum(by_status.values()), "by_status": by_status, "overdue": overdue}

    return await retry_read(_read, session=session)
