# This project was developed with assistance from AI tools.
"""Tests for the application lifecycle service (mocked session)."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from db.enums import AllocationStatus, ApplicationStatus, BookingStatus, NotificationType
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from scholarship_api.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    QuotaExhaustedError,
    ValidationError,
)
from scholarship_api.services.application import (
    application_stats,
    complete_application,
    create_application,
    delete_application,
    reference_number,
    review_application,
    submit_application,
)

from .factories import (
    bound_params,
    executed,
    make_application,
    make_result,
    make_scholarship,
    make_session,
)
from .functional.personas import officer, student_alice, student_bob

_NOTIFY = "scholarship_api.services.application.notify"


def _with_scholarship(session, scholarship):
    session.get = AsyncMock(return_value=scholarship)
    return session


def test_reference_number_format():
    assert reference_number(42, datetime(2026, 5, 1, tzinfo=UTC)) == "SCH-2026-000042"


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def test_create_opens_draft_for_student():
    session = _with_scholarship(make_session(make_result(first=None)), make_scholarship())

    app = await create_application(session, student_alice(), 3, {"essay": "Why me"})

    assert app.status == ApplicationStatus.DRAFT
    assert app.student_id == "stu-alice"
    assert app.application_data == {"essay": "Why me"}
    session.commit.assert_awaited_once()


async def test_create_rejects_staff():
    session = make_session()
    with pytest.raises(ForbiddenError):
        await create_application(session, officer(), 3)
    session.execute.assert_not_awaited()


@pytest.mark.parametrize(
    "scholarship,error,match",
    [
        (None, NotFoundError, "Scholarship not found"),
        (make_scholarship(is_active=False), ConflictError, "not accepting"),
        (
            make_scholarship(closes=datetime.now(UTC) - timedelta(days=1)),
            ConflictError,
            "outside its application period",
        ),
        (
            make_scholarship(opens=datetime.now(UTC) + timedelta(days=1)),
            ConflictError,
            "outside its application period",
        ),
        (make_scholarship(available_quota=0), QuotaExhaustedError, "No quota"),
    ],
)
async def test_create_checks_scholarship(scholarship, error, match):
    session = _with_scholarship(make_session(), scholarship)
    with pytest.raises(error, match=match):
        await create_application(session, student_alice(), 3)
    session.add.assert_not_called()


async def test_create_rejects_second_open_application():
    session = _with_scholarship(make_session(make_result(first=(11,))), make_scholarship())
    with pytest.raises(ConflictError, match="already have an open application"):
        await create_application(session, student_alice(), 3)
    session.add.assert_not_called()


async def test_create_maps_unique_index_race_to_conflict():
    session = _with_scholarship(make_session(make_result(first=None)), make_scholarship())
    session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

    with pytest.raises(ConflictError):
        await create_application(session, student_alice(), 3)
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_submit_complete_draft(mock_notify):
    app = make_application(complete=True)
    session = _with_scholarship(
        make_session(make_result(scalar_one=app), make_result(rowcount=1)),
        make_scholarship(),
    )

    result = await submit_application(
        session, student_alice(), 7, terms_accepted=True, declaration_accepted=True
    )

    assert result is app
    params = bound_params(session, 1)
    assert params["status"] == ApplicationStatus.SUBMITTED
    assert params["status_1"] == ApplicationStatus.DRAFT
    assert params["reference_number"] == f"SCH-{datetime.now(UTC).year}-000007"
    assert params["terms_accepted"] is True
    session.commit.assert_awaited_once()
    session.refresh.assert_awaited_once_with(app)

    mock_notify.assert_awaited_once()
    kwargs = mock_notify.call_args.kwargs
    assert kwargs["user_id"] == "stu-alice"
    assert kwargs["notification_type"] == NotificationType.APPLICATION_SUBMITTED


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_submit_locks_application_before_checking_sections(mock_notify):
    session = _with_scholarship(
        make_session(
            make_result(scalar_one=make_application(complete=True)), make_result(rowcount=1)
        ),
        make_scholarship(),
    )

    await submit_application(
        session, student_alice(), 7, terms_accepted=True, declaration_accepted=True
    )

    lookup = str(executed(session, 0).compile(dialect=postgresql.dialect()))
    assert lookup.startswith("SELECT scholarship_applications.")
    assert lookup.rstrip().endswith("FOR UPDATE")


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_submit_incomplete_lists_every_gap(mock_notify):
    app = make_application()
    session = _with_scholarship(make_session(make_result(scalar_one=app)), make_scholarship())

    with pytest.raises(ValidationError) as exc_info:
        await submit_application(
            session, student_alice(), 7, terms_accepted=False, declaration_accepted=True
        )

    errors = exc_info.value.errors
    assert errors[0] == "Terms and conditions must be accepted"
    assert "Financial information is required" in errors
    assert "National ID card is required" in errors
    assert session.execute.await_count == 1
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
    mock_notify.assert_not_awaited()


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_submit_lost_race_is_conflict(mock_notify):
    app = make_application(complete=True)
    session = _with_scholarship(
        make_session(make_result(scalar_one=app), make_result(rowcount=0)),
        make_scholarship(),
    )

    with pytest.raises(ConflictError, match="already been submitted"):
        await submit_application(
            session, student_alice(), 7, terms_accepted=True, declaration_accepted=True
        )
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
    mock_notify.assert_not_awaited()


async def test_submit_non_draft_is_invalid_transition():
    app = make_application(status=ApplicationStatus.SUBMITTED, complete=True)
    session = make_session(make_result(scalar_one=app))

    with pytest.raises(InvalidTransitionError, match="Cannot transition from 'submitted'"):
        await submit_application(
            session, student_alice(), 7, terms_accepted=True, declaration_accepted=True
        )


async def test_submit_other_students_application_is_forbidden():
    session = make_session(make_result(scalar_one=make_application(complete=True)))
    with pytest.raises(ForbiddenError):
        await submit_application(
            session, student_bob(), 7, terms_accepted=True, declaration_accepted=True
        )


async def test_submit_unknown_application():
    session = make_session(make_result(scalar_one=None))
    with pytest.raises(NotFoundError):
        await submit_application(
            session, student_alice(), 999, terms_accepted=True, declaration_accepted=True
        )


# ---------------------------------------------------------------------------
# review
# ---------------------------------------------------------------------------


async def test_review_requires_staff():
    session = make_session()
    with pytest.raises(ForbiddenError):
        await review_application(
            session, student_alice(), 7, new_status=ApplicationStatus.APPROVED
        )
    session.execute.assert_not_awaited()


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_review_approves_submitted_application(mock_notify):
    app = make_application(status=ApplicationStatus.SUBMITTED)
    session = make_session(make_result(scalar_one=app), make_result(rowcount=1))

    await review_application(
        session, officer(), 7, new_status=ApplicationStatus.APPROVED, review_notes="Strong file"
    )

    params = bound_params(session, 1)
    assert params["status"] == ApplicationStatus.APPROVED
    assert params["status_1"] == ApplicationStatus.SUBMITTED
    assert params["reviewer_id"] == "officer-olivia"
    assert params["review_notes"] == "Strong file"
    session.commit.assert_awaited_once()
    assert mock_notify.call_args.kwargs["notification_type"] == NotificationType.APPLICATION_APPROVED


@pytest.mark.parametrize(
    "current,target",
    [
        (ApplicationStatus.DRAFT, ApplicationStatus.APPROVED),
        (ApplicationStatus.SUBMITTED, ApplicationStatus.DRAFT),
        (ApplicationStatus.SUBMITTED, ApplicationStatus.COMPLETED),
        (ApplicationStatus.REJECTED, ApplicationStatus.UNDER_REVIEW),
        (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED),
        (ApplicationStatus.UNDER_REVIEW, ApplicationStatus.DOCUMENT_PENDING),
        (ApplicationStatus.DOCUMENT_PENDING, ApplicationStatus.APPROVED),
    ],
)
async def test_review_rejects_invalid_transitions(current, target):
    session = make_session(make_result(scalar_one=make_application(status=current)))
    with pytest.raises(InvalidTransitionError):
        await review_application(session, officer(), 7, new_status=target)
    assert session.execute.await_count == 1


async def test_review_terminal_status_message():
    session = make_session(
        make_result(scalar_one=make_application(status=ApplicationStatus.REJECTED))
    )
    with pytest.raises(InvalidTransitionError, match="terminal status"):
        await review_application(session, officer(), 7, new_status=ApplicationStatus.APPROVED)


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_review_concurrent_change_is_conflict(mock_notify):
    app = make_application(status=ApplicationStatus.UNDER_REVIEW)
    session = make_session(make_result(scalar_one=app), make_result(rowcount=0))

    with pytest.raises(ConflictError, match="changed during review"):
        await review_application(session, officer(), 7, new_status=ApplicationStatus.REJECTED)
    session.rollback.assert_awaited_once()
    mock_notify.assert_not_awaited()


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_rejecting_interviewed_application_frees_its_seat(mock_notify):
    app = make_application(status=ApplicationStatus.INTERVIEW_SCHEDULED)
    session = make_session(
        make_result(scalar_one=app),
        make_result(rowcount=1),
        make_result(scalar_one=60),
        make_result(scalar_one=0),
    )

    await review_application(session, officer(), 7, new_status=ApplicationStatus.REJECTED)

    cancel = bound_params(session, 2)
    assert cancel["booking_status"] == BookingStatus.CANCELLED
    assert cancel["cancellation_reason"] == "Application rejected"
    assert "current_bookings - " in str(executed(session, 3))
    session.commit.assert_awaited_once()


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_rejection_without_booking_touches_no_slot(mock_notify):
    app = make_application(status=ApplicationStatus.INTERVIEW_SCHEDULED)
    session = make_session(
        make_result(scalar_one=app), make_result(rowcount=1), make_result(scalar_one=None)
    )

    await review_application(session, officer(), 7, new_status=ApplicationStatus.REJECTED)

    assert session.execute.await_count == 3
    session.commit.assert_awaited_once()


@patch(_NOTIFY, new_callable=AsyncMock)
async def test_approving_interviewed_application_keeps_booking(mock_notify):
    app = make_application(status=ApplicationStatus.INTERVIEW_SCHEDULED)
    session = make_session(make_result(scalar_one=app), make_result(rowcount=1))

    await review_application(session, officer(), 7, new_status=ApplicationStatus.APPROVED)

    assert session.execute.await_count == 2


# ---------------------------------------------------------------------------
# complete / delete / stats
# ---------------------------------------------------------------------------


async def test_complete_requires_disbursed_allocation():
    app = make_application(status=ApplicationStatus.APPROVED)
    session = make_session(
        make_result(scalar_one=app), make_result(scalar_one=AllocationStatus.APPROVED)
    )
    with pytest.raises(ConflictError, match="Funds must be disbursed"):
        await complete_application(session, officer(), 7)
    session.commit.assert_not_awaited()


async def test_complete_after_disbursement():
    app = make_application(status=ApplicationStatus.APPROVED)
    session = make_session(
        make_result(scalar_one=app),
        make_result(scalar_one=AllocationStatus.DISBURSED),
        make_result(rowcount=1),
    )
    await complete_application(session, officer(), 7)
    assert bound_params(session, 2)["status"] == ApplicationStatus.COMPLETED
    session.commit.assert_awaited_once()


async def test_student_deletes_own_draft():
    session = make_session(make_result(scalar_one=make_application()), make_result(rowcount=1))
    await delete_application(session, student_alice(), 7)
    session.commit.assert_awaited_once()


async def test_student_cannot_delete_submitted_application():
    session = make_session(
        make_result(scalar_one=make_application(status=ApplicationStatus.SUBMITTED))
    )
    with pytest.raises(ConflictError, match="Only draft applications"):
        await delete_application(session, student_alice(), 7)
    assert session.execute.await_count == 1


async def test_staff_cannot_delete_allocated_application():
    session = make_session(
        make_result(scalar_one=make_application(status=ApplicationStatus.APPROVED)),
        make_result(first=(40,)),
    )
    with pytest.raises(ConflictError, match="allocation"):
        await delete_application(session, officer(), 7)
    session.commit.assert_not_awaited()


async def test_application_stats_fills_every_status():
    session = make_session(
        make_result(rows=[(ApplicationStatus.DRAFT, 2), (ApplicationStatus.SUBMITTED, 3)]),
        make_result(scalar=1),
    )
    stats = await application_stats(session, officer())

    assert stats["total"] == 5
    assert stats["overdue"] == 1
    assert stats["by_status"]["draft"] == 2
    assert stats["by_status"]["approved"] == 0
    assert set(stats["by_status"]) == {s.value for s in ApplicationStatus}


async def test_application_stats_staff_only():
    with pytest.raises(ForbiddenError):
        await application_stats(make_session(), student_alice())
