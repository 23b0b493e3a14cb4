# This project was developed with assistance from AI tools.
"""Shared test factory functions for ORM objects and mock sessions.

ORM objects are real (transient) model instances so services see the same
attribute behaviour they get from the database. Sessions are AsyncMocks
whose ``execute`` returns one prepared result per call, in order.
"""

from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from db import (
    Address,
    Allocation,
    Application,
    ApplicationDocument,
    EducationRecord,
    FamilyMember,
    FinancialInfo,
    InterviewBooking,
    InterviewSlot,
    PersonalInfo,
    Scholarship,
)
from db.enums import (
    AddressType,
    AllocationStatus,
    ApplicationStatus,
    BookingStatus,
    DocumentType,
    FamilyRelationship,
    VerificationStatus,
)

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def make_result(
    *,
    scalar_one=None,
    one=None,
    first=None,
    scalar=None,
    items=None,
    rows=None,
    rowcount=1,
):
    """Build a mock SQLAlchemy Result covering the accessors services use."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar_one
    result.one_or_none.return_value = one
    result.first.return_value = first
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = items or []
    result.all.return_value = rows or []
    result.rowcount = rowcount
    return result


def make_session(*results) -> AsyncMock:
    """AsyncMock session whose ``execute`` returns ``results`` in order."""
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=list(results))
    # add() and begin_nested() are synchronous in SQLAlchemy
    session.add = MagicMock()
    session.begin_nested = MagicMock()
    return session


def executed(session: AsyncMock, index: int):
    """The statement passed to the ``index``-th ``session.execute`` call."""
    return session.execute.call_args_list[index].args[0]


def bound_params(session: AsyncMock, index: int) -> dict:
    return executed(session, index).compile().params


def make_scholarship(
    id=3,
    total_quota=10,
    available_quota=10,
    is_active=True,
    required_documents=None,
    eligibility_criteria=None,
    opens=None,
    closes=None,
) -> Scholarship:
    now = datetime.now(UTC)
    return Scholarship(
        id=id,
        name="Merit Scholarship",
        amount=Decimal("20000.00"),
        total_quota=total_quota,
        available_quota=available_quota,
        application_start_date=opens or now - timedelta(days=10),
        application_end_date=closes or now + timedelta(days=20),
        eligibility_criteria=eligibility_criteria,
        required_documents=required_documents or [],
        is_active=is_active,
    )


def make_application(
    id=7,
    student_id="stu-alice",
    scholarship_id=3,
    status=ApplicationStatus.DRAFT,
    complete=False,
) -> Application:
    """Build an Application; ``complete=True`` fills every required section."""
    app = Application(
        id=id,
        student_id=student_id,
        scholarship_id=scholarship_id,
        status=status,
        terms_accepted=False,
        created_at=NOW,
        updated_at=NOW,
    )
    if complete:
        app.personal_info = PersonalInfo(
            first_name_local="Alice",
            last_name_local="Wong",
            email="alice@uni.example",
            faculty="Engineering",
            year_level=2,
            gpa=Decimal("3.40"),
        )
        app.addresses = [
            Address(
                address_type=AddressType.PERMANENT,
                address_line="12 College Road",
                province="Central",
            )
        ]
        app.education_history = [
            EducationRecord(education_level="High school", school_name="City School")
        ]
        app.family_members = [
            FamilyMember(
                relationship_type=FamilyRelationship.MOTHER,
                first_name="Mei",
                last_name="Wong",
                monthly_income=Decimal("1500.00"),
                is_alive=True,
            )
        ]
        app.financial_info = FinancialInfo(
            family_income=Decimal("18000.00"), has_student_loan=False
        )
        app.documents = [
            make_document(DocumentType.ID_CARD, id=1),
            make_document(DocumentType.TRANSCRIPT, id=2),
        ]
    return app


def make_document(
    document_type=DocumentType.ID_CARD,
    id=None,
    application_id=7,
    verification_status=VerificationStatus.PENDING,
) -> ApplicationDocument:
    return ApplicationDocument(
        id=id,
        application_id=application_id,
        document_type=document_type,
        verification_status=verification_status,
        created_at=NOW,
    )


def make_allocation(
    id=40,
    application_id=7,
    scholarship_id=3,
    status=AllocationStatus.PENDING,
    amount=Decimal("20000.00"),
) -> Allocation:
    return Allocation(
        id=id,
        application_id=application_id,
        scholarship_id=scholarship_id,
        budget_year=2026,
        allocated_amount=amount,
        allocation_status=status,
        allocation_date=NOW,
        allocated_by="officer-olivia",
    )


def budget_row(total="100000.00", allocated="0.00"):
    """A row shaped like ``select(Budget.total_budget, ...)`` output."""
    total, allocated = Decimal(total), Decimal(allocated)
    row = MagicMock()
    row.total_budget = total
    row.allocated_budget = allocated
    row.remaining_budget = total - allocated
    return row


def quota_row(total=10, available=10):
    row = MagicMock()
    row.total_quota = total
    row.available_quota = available
    return row


def make_slot(
    id=60,
    scholarship_id=3,
    max_capacity=2,
    current_bookings=0,
    is_available=True,
    location="Room 204",
) -> InterviewSlot:
    return InterviewSlot(
        id=id,
        scholarship_id=scholarship_id,
        interviewer_id="officer-olivia",
        interview_date=date(2026, 3, 20),
        start_time=time(9, 0),
        end_time=time(9, 30),
        location=location,
        max_capacity=max_capacity,
        current_bookings=current_bookings,
        is_available=is_available,
        created_by="officer-olivia",
    )


def make_booking(
    id=80,
    slot_id=60,
    application_id=7,
    student_id="stu-alice",
    status=BookingStatus.BOOKED,
) -> InterviewBooking:
    return InterviewBooking(
        id=id,
        slot_id=slot_id,
        application_id=application_id,
        student_id=student_id,
        booking_status=status,
        booked_at=NOW,
    )


def slot_row(max_capacity=2, current_bookings=0, is_available=True):
    """A row shaped like ``SlotLedger.snapshot``'s select output."""
    row = MagicMock()
    row.max_capacity = max_capacity
    row.current_bookings = current_bookings
    row.is_available = is_available
    return row
