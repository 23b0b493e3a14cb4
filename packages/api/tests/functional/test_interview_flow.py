# This project was developed with assistance from AI tools.
"""Functional tests: interview slot and booking routes."""

from unittest.mock import AsyncMock, patch

from db import InterviewResult
from db.enums import BookingStatus, InterviewRecommendation

from scholarship_api.core.errors import ConflictError, SlotFullError

from ..factories import NOW, make_booking, make_slot
from .personas import admin, officer, student_alice

_SVC = "scholarship_api.services.interview"


@patch(f"{_SVC}.create_slot", new_callable=AsyncMock)
def test_officer_opens_slot(mock_create, make_client):
    mock_create.return_value = make_slot(max_capacity=4)
    client = make_client(officer())

    resp = client.post(
        "/api/interviews/slots",
        json={
            "scholarship_id": 3,
            "interview_date": "2026-03-20",
            "start_time": "09:00",
            "end_time": "09:30",
            "max_capacity": 4,
        },
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["max_capacity"] == 4
    assert body["current_bookings"] == 0
    assert mock_create.call_args.args[2].start_time.hour == 9


def test_students_cannot_open_slots(make_client):
    client = make_client(student_alice())
    resp = client.post(
        "/api/interviews/slots",
        json={
            "scholarship_id": 3,
            "interview_date": "2026-03-20",
            "start_time": "09:00",
            "end_time": "09:30",
        },
    )
    assert resp.status_code == 403


def test_slot_capacity_must_be_positive(make_client):
    client = make_client(officer())
    resp = client.post(
        "/api/interviews/slots",
        json={
            "scholarship_id": 3,
            "interview_date": "2026-03-20",
            "start_time": "09:00",
            "end_time": "09:30",
            "max_capacity": 0,
        },
    )
    assert resp.status_code == 422
    assert any("max_capacity" in e for e in resp.json()["errors"])


@patch(f"{_SVC}.list_slots", new_callable=AsyncMock)
def test_students_browse_available_slots(mock_list, make_client):
    mock_list.return_value = [make_slot(), make_slot(id=61, current_bookings=1)]
    client = make_client(student_alice())

    resp = client.get("/api/interviews/slots?scholarship_id=3&available_only=true")

    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()["data"]] == [60, 61]
    assert mock_list.call_args.kwargs["available_only"] is True
    assert mock_list.call_args.kwargs["scholarship_id"] == 3


@patch(f"{_SVC}.set_slot_availability", new_callable=AsyncMock)
def test_close_slot(mock_set, make_client):
    mock_set.return_value = make_slot(is_available=False)
    client = make_client(admin())

    resp = client.patch("/api/interviews/slots/60", json={"is_available": False})

    assert resp.status_code == 200
    assert resp.json()["is_available"] is False
    assert mock_set.call_args.args[2:] == (60, False)


@patch(f"{_SVC}.delete_slot", new_callable=AsyncMock)
def test_delete_booked_slot_is_conflict(mock_delete, make_client):
    mock_delete.side_effect = ConflictError("Interview slot has bookings and cannot be deleted")
    client = make_client(officer())

    resp = client.delete("/api/interviews/slots/60")

    assert resp.status_code == 409
    assert resp.json()["title"] == "Conflict"


@patch(f"{_SVC}.book_interview", new_callable=AsyncMock)
def test_student_books_interview(mock_book, make_client):
    mock_book.return_value = make_booking()
    client = make_client(student_alice())

    resp = client.post(
        "/api/interviews/bookings",
        json={"application_id": 7, "slot_id": 60, "student_notes": "Prefer mornings"},
    )

    assert resp.status_code == 201
    assert resp.json()["booking_status"] == "booked"
    assert mock_book.call_args.args[2:] == (7, 60)
    assert mock_book.call_args.kwargs["student_notes"] == "Prefer mornings"


@patch(f"{_SVC}.book_interview", new_callable=AsyncMock)
def test_full_slot_is_resource_exhausted(mock_book, make_client):
    mock_book.side_effect = SlotFullError("Interview slot is fully booked")
    client = make_client(student_alice())

    resp = client.post("/api/interviews/bookings", json={"application_id": 7, "slot_id": 60})

    assert resp.status_code == 409
    assert resp.json()["title"] == "Resource Exhausted"
    assert resp.json()["detail"] == "Interview slot is fully booked"


@patch(f"{_SVC}.cancel_booking", new_callable=AsyncMock)
def test_cancel_booking(mock_cancel, make_client):
    mock_cancel.return_value = make_booking(status=BookingStatus.CANCELLED)
    client = make_client(student_alice())

    resp = client.post("/api/interviews/bookings/80/cancel", json={"reason": "Exam clash"})

    assert resp.status_code == 200
    assert resp.json()["booking_status"] == "cancelled"
    assert mock_cancel.call_args.kwargs["reason"] == "Exam clash"


@patch(f"{_SVC}.reschedule_booking", new_callable=AsyncMock)
def test_reschedule_booking(mock_reschedule, make_client):
    moved = make_booking(slot_id=62)
    moved.rescheduled_from_slot_id = 60
    mock_reschedule.return_value = moved
    client = make_client(student_alice())

    resp = client.post("/api/interviews/bookings/80/reschedule", json={"new_slot_id": 62})

    assert resp.status_code == 200
    assert resp.json()["slot_id"] == 62
    assert resp.json()["rescheduled_from_slot_id"] == 60


@patch(f"{_SVC}.confirm_booking", new_callable=AsyncMock)
def test_confirm_booking(mock_confirm, make_client):
    confirmed = make_booking(status=BookingStatus.CONFIRMED)
    confirmed.confirmed_at = NOW
    mock_confirm.return_value = confirmed
    client = make_client(student_alice())

    resp = client.post("/api/interviews/bookings/80/confirm")

    assert resp.status_code == 200
    assert resp.json()["booking_status"] == "confirmed"


@patch(f"{_SVC}.record_result", new_callable=AsyncMock)
def test_record_interview_result(mock_record, make_client):
    mock_record.return_value = InterviewResult(
        id=5,
        booking_id=80,
        interviewer_id="officer-olivia",
        recommendation=InterviewRecommendation.HIGHLY_RECOMMENDED,
        created_at=NOW,
    )
    client = make_client(officer())

    resp = client.post(
        "/api/interviews/bookings/80/result",
        json={"recommendation": "highly_recommended", "overall_score": "92.5"},
    )

    assert resp.status_code == 201
    assert resp.json()["recommendation"] == "highly_recommended"


def test_students_cannot_record_results(make_client):
    client = make_client(student_alice())
    resp = client.post("/api/interviews/bookings/80/result", json={"recommendation": "recommended"})
    assert resp.status_code == 403


def test_score_above_hundred_fails_validation(make_client):
    client = make_client(officer())
    resp = client.post(
        "/api/interviews/bookings/80/result",
        json={"recommendation": "recommended", "overall_score": "101"},
    )
    assert resp.status_code == 422
