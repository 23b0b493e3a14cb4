# This project was developed with assistance from AI tools.
"""Interview slot and booking routes."""

from datetime import date

from db import get_db
from db.enums import BookingStatus, UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.interview import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    CancelBookingRequest,
    InterviewResultCreate,
    InterviewResultResponse,
    InterviewSlotCreate,
    InterviewSlotListResponse,
    InterviewSlotResponse,
    RescheduleRequest,
    SlotAvailabilityUpdate,
)
from ..services import interview as interview_service

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.OFFICER)
_ALL = (*_STAFF, UserRole.STUDENT)


@router.post(
    "/slots",
    response_model=InterviewSlotResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_slot(
    body: InterviewSlotCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InterviewSlotResponse:
    slot = await interview_service.create_slot(session, user, body)
    return InterviewSlotResponse.model_validate(slot)


@router.get(
    "/slots",
    response_model=InterviewSlotListResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def list_slots(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    scholarship_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    available_only: bool = False,
) -> InterviewSlotListResponse:
    """Interview slots in chronological order; ``available_only`` hides full and closed ones."""
    slots = await interview_service.list_slots(
        session,
        user,
        scholarship_id=scholarship_id,
        date_from=date_from,
        date_to=date_to,
        available_only=available_only,
    )
    return InterviewSlotListResponse(data=[InterviewSlotResponse.model_validate(s) for s in slots])


@router.patch(
    "/slots/{slot_id}",
    response_model=InterviewSlotResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def set_slot_availability(
    slot_id: int,
    body: SlotAvailabilityUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InterviewSlotResponse:
    slot = await interview_service.set_slot_availability(session, user, slot_id, body.is_available)
    return InterviewSlotResponse.model_validate(slot)


@router.delete(
    "/slots/{slot_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def delete_slot(
    slot_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    await interview_service.delete_slot(session, user, slot_id)


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def book_interview(
    body: BookingCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BookingResponse:
    """Book a seat for an application in ``interview_scheduled``.

    Returns 409 "Resource Exhausted" when the slot has no seat left.
    """
    booking = await interview_service.book_interview(
        session, user, body.application_id, body.slot_id, student_notes=body.student_notes
    )
    return BookingResponse.model_validate(booking)


@router.get(
    "/bookings",
    response_model=BookingListResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def list_bookings(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    application_id: int | None = None,
    slot_id: int | None = None,
    booking_status: BookingStatus | None = None,
) -> BookingListResponse:
    bookings = await interview_service.list_bookings(
        session,
        user,
        application_id=application_id,
        slot_id=slot_id,
        booking_status=booking_status,
    )
    return BookingListResponse(data=[BookingResponse.model_validate(b) for b in bookings])


@router.get(
    "/bookings/{booking_id}",
    response_model=BookingResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def get_booking(
    booking_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await interview_service.get_booking(session, user, booking_id)
    return BookingResponse.model_validate(booking)


@router.post(
    "/bookings/{booking_id}/confirm",
    response_model=BookingResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def confirm_booking(
    booking_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await interview_service.confirm_booking(session, user, booking_id)
    return BookingResponse.model_validate(booking)


@router.post(
    "/bookings/{booking_id}/cancel",
    response_model=BookingResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def cancel_booking(
    booking_id: int,
    body: CancelBookingRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await interview_service.cancel_booking(session, user, booking_id, reason=body.reason)
    return BookingResponse.model_validate(booking)


@router.post(
    "/bookings/{booking_id}/reschedule",
    response_model=BookingResponse,
    dependencies=[Depends(require_roles(*_ALL))],
)
async def reschedule_booking(
    booking_id: int,
    body: RescheduleRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await interview_service.reschedule_booking(session, user, booking_id, body.new_slot_id)
    return BookingResponse.model_validate(booking)


@router.post(
    "/bookings/{booking_id}/result",
    response_model=InterviewResultResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def record_result(
    booking_id: int,
    body: InterviewResultCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InterviewResultResponse:
    result = await interview_service.record_result(session, user, booking_id, body)
    return InterviewResultResponse.model_validate(result)


@router.get(
    "/bookings/{booking_id}/result",
    response_model=InterviewResultResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def get_result(
    booking_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> InterviewResultResponse:
    result = await interview_service.get_result(session, user, booking_id)
    return InterviewResultResponse.model_validate(result)
