# This project was developed with assistance from AI tools.
"""Interview slot, booking and result schemas."""

from datetime import date, datetime, time
from decimal import Decimal

from db.enums import BookingStatus, InterviewRecommendation
from pydantic import BaseModel, ConfigDict, Field


class InterviewSlotCreate(BaseModel):
    """Open an interview time for a scholarship."""

    scholarship_id: int
    interviewer_id: str | None = Field(
        default=None,
        max_length=255,
        description="Interviewing staff member. Defaults to the caller.",
    )
    interview_date: date
    start_time: time
    end_time: time
    location: str | None = Field(default=None, max_length=255)
    max_capacity: int = Field(default=1, ge=1, le=50)
    notes: str | None = None


class SlotAvailabilityUpdate(BaseModel):
    is_available: bool


class InterviewSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    scholarship_id: int
    interviewer_id: str
    interview_date: date
    start_time: time
    end_time: time
    location: str | None = None
    max_capacity: int
    current_bookings: int
    is_available: bool
    notes: str | None = None
    created_by: str


class InterviewSlotListResponse(BaseModel):
    data: list[InterviewSlotResponse]


class BookingCreate(BaseModel):
    application_id: int
    slot_id: int
    student_notes: str | None = None


class CancelBookingRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class RescheduleRequest(BaseModel):
    new_slot_id: int


class InterviewResultCreate(BaseModel):
    """Interviewer's assessment, recorded once per booking."""

    overall_score: Decimal | None = Field(default=None, ge=0, le=100, decimal_places=2)
    recommendation: InterviewRecommendation
    comments: str | None = None


class InterviewResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    interviewer_id: str
    overall_score: Decimal | None = None
    recommendation: InterviewRecommendation
    comments: str | None = None
    created_at: datetime


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slot_id: int
    application_id: int
    student_id: str
    booking_status: BookingStatus
    booked_at: datetime
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    rescheduled_from_slot_id: int | None = None
    student_notes: str | None = None


class BookingListResponse(BaseModel):
    data: list[BookingResponse]
