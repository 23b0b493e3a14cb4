# This project was developed with assistance from AI tools.
"""Interview scheduling.

Staff open interview slots with a fixed number of seats; students whose
application reached ``interview_scheduled`` book one seat. Seats are
counted by SlotLedger, so the last seat of a slot goes to exactly one of
any number of concurrent bookers.

Lock order is application, then booking, then slots in ascending id. A
reschedule touches two slots and always takes the lower id first, so two
reschedules crossing the same pair of slots cannot deadlock.
"""

import logging
from datetime import UTC, date, datetime

from db import InterviewBooking, InterviewResult, InterviewSlot, Scholarship
from db.database import retry_read
from db.enums import (
    ApplicationStatus,
    BookingStatus,
    NotificationPriority,
    NotificationType,
)
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import ensure_owner, require_staff
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.interview import InterviewResultCreate, InterviewSlotCreate
from .application import load_application
from .audit import write_audit_event
from .ledger import SlotLedger
from .notification import notify
from .scope import apply_student_scope

logger = logging.getLogger(__name__)

_ACTIVE = BookingStatus.active_statuses()


def _slot_label(slot: InterviewSlot) -> str:
    when = f"{slot.interview_date.isoformat()} {slot.start_time.strftime('%H:%M')}"
    return f"{when} at {slot.location}" if slot.location else when


# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------


async def create_slot(
    session: AsyncSession,
    user: UserContext,
    data: InterviewSlotCreate,
) -> InterviewSlot:
    """Open a new interview slot.

    Raises:
        ValidationError: end not after start, or a date in the past.
        NotFoundError: unknown scholarship.
        ConflictError: the interviewer already has an overlapping slot.
    """
    require_staff(user, "create_interview_slot")
    errors = []
    if data.end_time <= data.start_time:
        errors.append("End time must be after start time")
    if data.interview_date < datetime.now(UTC).date():
        errors.append("Interview date cannot be in the past")
    if errors:
        raise ValidationError("Invalid interview slot", errors)

    if await session.get(Scholarship, data.scholarship_id) is None:
        raise NotFoundError("Scholarship not found")

    interviewer_id = data.interviewer_id or user.user_id
    overlap = (
        await session.execute(
            select(InterviewSlot.id).where(
                InterviewSlot.interviewer_id == interviewer_id,
                InterviewSlot.interview_date == data.interview_date,
                InterviewSlot.start_time < data.end_time,
                InterviewSlot.end_time > data.start_time,
            )
        )
    ).first()
    if overlap is not None:
        raise ConflictError("Interviewer already has a slot overlapping this time")

    slot = InterviewSlot(
        scholarship_id=data.scholarship_id,
        interviewer_id=interviewer_id,
        interview_date=data.interview_date,
        start_time=data.start_time,
        end_time=data.end_time,
        location=data.location,
        max_capacity=data.max_capacity,
        current_bookings=0,
        is_available=True,
        notes=data.notes,
        created_by=user.user_id,
    )
    session.add(slot)
    await session.flush()
    await write_audit_event(
        session,
        event_type="interview_slot_created",
        user=user,
        event_data={"slot_id": slot.id, "scholarship_id": data.scholarship_id},
    )
    await session.commit()
    logger.info(
        "Interview slot %s opened for scholarship %s on %s",
        slot.id,
        data.scholarship_id,
        data.interview_date,
    )
    return slot


async def list_slots(
    session: AsyncSession,
    user: UserContext,
    *,
    scholarship_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    available_only: bool = False,
) -> list[InterviewSlot]:
    """Slots in chronological order. ``available_only`` hides closed and full slots."""

    async def _read() -> list[InterviewSlot]:
        stmt = select(InterviewSlot)
        if scholarship_id is not None:
            stmt = stmt.where(InterviewSlot.scholarship_id == scholarship_id)
        if date_from is not None:
            stmt = stmt.where(InterviewSlot.interview_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(InterviewSlot.interview_date <= date_to)
        if available_only:
            stmt = stmt.where(
                InterviewSlot.is_available.is_(True),
                InterviewSlot.current_bookings < InterviewSlot.max_capacity,
            )
        stmt = stmt.order_by(
            InterviewSlot.interview_date, InterviewSlot.start_time, InterviewSlot.id
        )
        return list((await session.execute(stmt)).scalars().all())

    return await retry_read(_read, session=session)


async def set_slot_availability(
    session: AsyncSession,
    user: UserContext,
    slot_id: int,
    is_available: bool,
) -> InterviewSlot:
    """Open or close a slot for new bookings. Existing bookings are kept."""
    require_staff(user, "update_interview_slot")
    slot = (
        await session.execute(
            update(InterviewSlot)
            .where(InterviewSlot.id == slot_id)
            .values(is_available=is_available)
            .returning(InterviewSlot)
        )
    ).scalar_one_or_none()
    if slot is None:
        await session.rollback()
        raise NotFoundError("Interview slot not found")
    await session.commit()
    logger.info("Interview slot %s is_available=%s", slot_id, is_available)
    return slot


async def delete_slot(session: AsyncSession, user: UserContext, slot_id: int) -> None:
    """Delete a slot nobody has ever booked.

    A slot with booked seats, or with cancelled bookings in its history,
    is a ConflictError; close it with set_slot_availability instead.
    """
    require_staff(user, "delete_interview_slot")
    try:
        result = await session.execute(
            delete(InterviewSlot)
            .where(InterviewSlot.id == slot_id, InterviewSlot.current_bookings == 0)
            .execution_options(synchronize_session=False)
        )
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Interview slot has booking history; close it instead") from exc
    if result.rowcount == 0:
        await SlotLedger(session).snapshot(slot_id)  # NotFoundError when missing
        await session.rollback()
        raise ConflictError("Interview slot has bookings and cannot be deleted")

    await write_audit_event(
        session,
        event_type="interview_slot_deleted",
        user=user,
        event_data={"slot_id": slot_id},
    )
    await session.commit()
    logger.info("Interview slot %s deleted by %s", slot_id, user.user_id)


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


async def _load_booking(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
    *,
    action: str = "view",
    for_update: bool = False,
) -> InterviewBooking:
    stmt = select(InterviewBooking).where(InterviewBooking.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update()
    booking = (await session.execute(stmt)).scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Interview booking not found")
    ensure_owner(user, booking.student_id, action)
    return booking


async def book_interview(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    slot_id: int,
    *,
    student_notes: str | None = None,
) -> InterviewBooking:
    """Book one seat of ``slot_id`` for an application invited to interview.

    Raises:
        NotFoundError: unknown application or slot.
        ConflictError: application not in interview_scheduled, slot of
            another scholarship or closed, or an active booking exists.
        SlotFullError: no seat left.
    """
    try:
        application = await load_application(
            session, user, application_id, action="book interviews for", for_update=True
        )
        if application.status != ApplicationStatus.INTERVIEW_SCHEDULED:
            raise ConflictError("Interviews can only be booked for applications invited to interview")

        slot = await session.get(InterviewSlot, slot_id)
        if slot is None:
            raise NotFoundError("Interview slot not found")
        if slot.scholarship_id != application.scholarship_id:
            raise ConflictError("Interview slot belongs to a different scholarship")

        active = (
            await session.execute(
                select(InterviewBooking.id).where(
                    InterviewBooking.application_id == application_id,
                    InterviewBooking.booking_status.in_(_ACTIVE),
                )
            )
        ).first()
        if active is not None:
            raise ConflictError("Application already has an active interview booking")

        booking = InterviewBooking(
            slot_id=slot_id,
            application_id=application_id,
            student_id=application.student_id,
            booking_status=BookingStatus.BOOKED,
            student_notes=student_notes,
        )
        session.add(booking)
        await session.flush()

        await SlotLedger(session).reserve(slot_id)

        await write_audit_event(
            session,
            event_type="interview_booked",
            user=user,
            application_id=application_id,
            event_data={"booking_id": booking.id, "slot_id": slot_id},
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Application already has an active interview booking") from exc
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Interview booking %s: application=%s slot=%s", booking.id, application_id, slot_id
    )
    await notify(
        user_id=application.student_id,
        notification_type=NotificationType.INTERVIEW_BOOKED,
        title="Interview booked",
        message=f"Your interview is booked for {_slot_label(slot)}.",
        reference_id=booking.id,
        reference_type="interview_booking",
        priority=NotificationPriority.HIGH,
    )
    return booking


async def confirm_booking(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
) -> InterviewBooking:
    """Move a booked interview to confirmed."""
    await _load_booking(session, user, booking_id, action="confirm")
    booking = (
        await session.execute(
            update(InterviewBooking)
            .where(
                InterviewBooking.id == booking_id,
                InterviewBooking.booking_status == BookingStatus.BOOKED,
            )
            .values(booking_status=BookingStatus.CONFIRMED, confirmed_at=datetime.now(UTC))
            .returning(InterviewBooking)
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if booking is None:
        await session.rollback()
        raise ConflictError("Only booked interviews can be confirmed")

    await write_audit_event(
        session,
        event_type="interview_confirmed",
        user=user,
        application_id=booking.application_id,
        event_data={"booking_id": booking_id},
    )
    await session.commit()
    logger.info("Interview booking %s confirmed", booking_id)
    return booking


async def cancel_booking(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
    *,
    reason: str | None = None,
) -> InterviewBooking:
    """Cancel a booked or confirmed interview and give its seat back.

    The seat released is the one the booking holds when the cancel lands,
    so a reschedule racing the cancel cannot strand a seat.
    """
    await _load_booking(session, user, booking_id, action="cancel")
    try:
        booking = (
            await session.execute(
                update(InterviewBooking)
                .where(
                    InterviewBooking.id == booking_id,
                    InterviewBooking.booking_status.in_(_ACTIVE),
                )
                .values(
                    booking_status=BookingStatus.CANCELLED,
                    cancelled_at=datetime.now(UTC),
                    cancellation_reason=reason,
                )
                .returning(InterviewBooking)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if booking is None:
            raise ConflictError("Only booked or confirmed interviews can be cancelled")

        await SlotLedger(session).release(booking.slot_id)
        await write_audit_event(
            session,
            event_type="interview_cancelled",
            user=user,
            application_id=booking.application_id,
            event_data={"booking_id": booking_id, "slot_id": booking.slot_id},
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Interview booking %s cancelled by %s", booking_id, user.user_id)
    if user.is_staff:
        await notify(
            user_id=booking.student_id,
            notification_type=NotificationType.INTERVIEW_CANCELLED,
            title="Interview cancelled",
            message=reason or "Your interview booking was cancelled. Please book another slot.",
            reference_id=booking_id,
            reference_type="interview_booking",
            priority=NotificationPriority.HIGH,
        )
    return booking


async def reschedule_booking(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
    new_slot_id: int,
) -> InterviewBooking:
    """Move an active booking to another slot of the same scholarship.

    The new seat is taken and the old one released in one transaction; when
    the new slot is full nothing changes. A rescheduled booking goes back to
    ``booked`` and must be confirmed again.
    """
    try:
        booking = await _load_booking(
            session, user, booking_id, action="reschedule", for_update=True
        )
        if booking.booking_status not in _ACTIVE:
            raise ConflictError("Only booked or confirmed interviews can be rescheduled")
        old_slot_id = booking.slot_id
        if new_slot_id == old_slot_id:
            raise ConflictError("Booking is already in this slot")

        old_slot = await session.get(InterviewSlot, old_slot_id)
        new_slot = await session.get(InterviewSlot, new_slot_id)
        if new_slot is None:
            raise NotFoundError("Interview slot not found")
        if new_slot.scholarship_id != old_slot.scholarship_id:
            raise ConflictError("Interview slot belongs to a different scholarship")

        ledger = SlotLedger(session)
        if new_slot_id < old_slot_id:
            await ledger.reserve(new_slot_id)
            await ledger.release(old_slot_id)
        else:
            await ledger.release(old_slot_id)
            await ledger.reserve(new_slot_id)

        booking.slot_id = new_slot_id
        booking.rescheduled_from_slot_id = old_slot_id
        booking.booking_status = BookingStatus.BOOKED
        booking.confirmed_at = None
        await write_audit_event(
            session,
            event_type="interview_rescheduled",
            user=user,
            application_id=booking.application_id,
            event_data={"booking_id": booking_id, "from_slot": old_slot_id, "to_slot": new_slot_id},
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(booking)
    logger.info(
        "Interview booking %s moved from slot %s to %s", booking_id, old_slot_id, new_slot_id
    )
    await notify(
        user_id=booking.student_id,
        notification_type=NotificationType.INTERVIEW_BOOKED,
        title="Interview rescheduled",
        message=f"Your interview moved to {_slot_label(new_slot)}.",
        reference_id=booking_id,
        reference_type="interview_booking",
    )
    return booking


async def record_result(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
    data: InterviewResultCreate,
) -> InterviewResult:
    """Record the interviewer's assessment and mark the booking completed."""
    require_staff(user, "record_interview_result")
    try:
        booking = await _load_booking(session, user, booking_id, for_update=True)
        if booking.booking_status not in _ACTIVE:
            raise ConflictError("Results can only be recorded for booked or confirmed interviews")

        result = InterviewResult(
            booking_id=booking_id,
            interviewer_id=user.user_id,
            overall_score=data.overall_score,
            recommendation=data.recommendation,
            comments=data.comments,
        )
        session.add(result)
        booking.booking_status = BookingStatus.COMPLETED
        await session.flush()
        await write_audit_event(
            session,
            event_type="interview_result_recorded",
            user=user,
            application_id=booking.application_id,
            event_data={"booking_id": booking_id, "recommendation": data.recommendation.value},
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Interview result already recorded") from exc
    except Exception:
        await session.rollback()
        raise

    logger.info("Interview result recorded for booking %s", booking_id)
    return result


async def get_booking(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
) -> InterviewBooking:
    """Return one booking; students may only see their own."""

    async def _read() -> InterviewBooking:
        return await _load_booking(session, user, booking_id)

    return await retry_read(_read, session=session)


async def get_result(
    session: AsyncSession,
    user: UserContext,
    booking_id: int,
) -> InterviewResult:
    """Return the assessment of one booking. Staff only."""
    require_staff(user, "view_interview_result")

    async def _read() -> InterviewResult:
        result = (
            await session.execute(
                select(InterviewResult).where(InterviewResult.booking_id == booking_id)
            )
        ).scalar_one_or_none()
        if result is None:
            raise NotFoundError("No interview result recorded for this booking")
        return result

    return await retry_read(_read, session=session)


async def list_bookings(
    session: AsyncSession,
    user: UserContext,
    *,
    application_id: int | None = None,
    slot_id: int | None = None,
    booking_status: BookingStatus | None = None,
) -> list[InterviewBooking]:
    """Bookings visible to the caller, newest first."""

    async def _read() -> list[InterviewBooking]:
        stmt = apply_student_scope(
            select(InterviewBooking),
            user,
            join_to_application=InterviewBooking.application,
        )
        if application_id is not None:
            stmt = stmt.where(InterviewBooking.application_id == application_id)
        if slot_id is not None:
            stmt = stmt.where(InterviewBooking.slot_id == slot_id)
        if booking_status is not None:
            stmt = stmt.where(InterviewBooking.booking_status == booking_status)
        stmt = stmt.order_by(InterviewBooking.booked_at.desc(), InterviewBooking.id.desc())
        return list((await session.execute(stmt)).scalars().all())

    return await retry_read(_read, session=session)
