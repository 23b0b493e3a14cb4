# This project was developed with assistance from AI tools.
"""Functional tests: scholarship catalogue, eligibility and screening routes."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

from ..factories import make_application, make_result, make_scholarship, make_session
from .personas import admin, officer, student_alice


def _session_with(scholarship, *results):
    session = make_session(*results)
    session.get = AsyncMock(return_value=scholarship)
    return session


def test_eligibility_reports_missing_data(make_client):
    scholarship = make_scholarship(
        eligibility_criteria={"min_gpa": 3.0, "max_family_income": 20000}
    )
    client = make_client(student_alice(), _session_with(scholarship))

    resp = client.post("/api/scholarships/3/eligibility", json={"gpa": 3.5})

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_eligible"] is True
    assert body["eligibility_score"] == 100.0
    assert body["missing_fields"] == ["family income"]


def test_eligibility_unknown_scholarship(make_client):
    client = make_client(student_alice(), _session_with(None))
    resp = client.post("/api/scholarships/99/eligibility", json={"gpa": 3.5})
    assert resp.status_code == 404


def test_create_scholarship_starts_with_full_quota(make_client):
    session = make_session()

    def _assign_id():
        session.add.call_args.args[0].id = 12

    session.flush.side_effect = _assign_id
    client = make_client(admin(), session)
    now = datetime.now(UTC)

    resp = client.post(
        "/api/scholarships/",
        json={
            "name": "Need-based Grant",
            "amount": "15000.00",
            "total_quota": 4,
            "application_start_date": now.isoformat(),
            "application_end_date": (now + timedelta(days=30)).isoformat(),
            "required_documents": ["income_certificate"],
        },
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == 12
    assert body["available_quota"] == 4
    assert body["required_documents"] == ["income_certificate"]
    session.commit.assert_awaited_once()


def test_scholarship_window_must_be_ordered(make_client):
    client = make_client(admin())
    now = datetime.now(UTC)
    resp = client.post(
        "/api/scholarships/",
        json={
            "name": "Backwards",
            "amount": "100.00",
            "total_quota": 1,
            "application_start_date": now.isoformat(),
            "application_end_date": (now - timedelta(days=1)).isoformat(),
        },
    )
    assert resp.status_code == 422


def test_students_cannot_open_budgets(make_client):
    client = make_client(student_alice())
    resp = client.post(
        "/api/scholarships/3/budgets", json={"budget_year": 2026, "total_budget": "1000.00"}
    )
    assert resp.status_code == 403


def test_application_priority_score(make_client):
    app = make_application(complete=True)
    client = make_client(officer(), make_session(make_result(scalar_one=app)))

    resp = client.get("/api/applications/7/priority-score")

    # GPA 3.40 -> 85.0, income 18,000 -> 93.14, no activities
    assert resp.status_code == 200
    assert resp.json()["total_score"] == 61.94


def test_priority_score_needs_gpa_and_income(make_client):
    client = make_client(officer(), make_session(make_result(scalar_one=make_application())))

    resp = client.get("/api/applications/7/priority-score")

    assert resp.status_code == 422
    assert resp.json()["errors"] == [
        "GPA is required for scoring",
        "Family income is required for scoring",
    ]


def test_application_eligibility_uses_declared_sections(make_client):
    app = make_application(complete=True)
    scholarship = make_scholarship(eligibility_criteria={"allowed_faculties": ["Medicine"]})
    client = make_client(student_alice(), _session_with(scholarship, make_result(scalar_one=app)))

    resp = client.get("/api/applications/7/eligibility")

    body = resp.json()
    assert body["is_eligible"] is False
    assert body["eligibility_score"] == 75.0
    assert body["criteria_results"][0]["actual"] == "Engineering"
