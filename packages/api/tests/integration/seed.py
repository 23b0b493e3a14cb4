# This project was developed with assistance from AI tools.
"""Seed data helpers for integration tests.

Each helper commits through its own session so concurrent workers see the rows.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal


async def seed_scholarship(
    session_factory,
    *,
    total_quota: int = 10,
    available_quota: int | None = None,
    total_budget: str = "100000.00",
    budget_year: int = 2026,
) -> int:
    """Create an open scholarship with one budget year. Returns its id."""
    from db import Budget, Scholarship

    now = datetime.now(UTC)
    async with session_factory() as session:
        scholarship = Scholarship(
            name="Merit Scholarship",
            amount=Decimal("20000.00"),
            total_quota=total_quota,
            available_quota=total_quota if available_quota is None else available_quota,
            application_start_date=now - timedelta(days=10),
            application_end_date=now + timedelta(days=20),
            required_documents=[],
            is_active=True,
        )
        session.add(scholarship)
        await session.flush()
        session.add(
            Budget(
                scholarship_id=scholarship.id,
                budget_year=budget_year,
                total_budget=Decimal(total_budget),
                allocated_budget=Decimal("0"),
                remaining_budget=Decimal(total_budget),
            )
        )
        await session.commit()
        return scholarship.id


async def seed_applications(session_factory, scholarship_id: int, student_ids, status, *, complete=False):
    """Insert one application per student id. Returns their ids in order."""
    from db import (
        Address,
        Application,
        ApplicationDocument,
        EducationRecord,
        FamilyMember,
        FinancialInfo,
        PersonalInfo,
    )
    from db.enums import DocumentType, FamilyRelationship

    async with session_factory() as session:
        applications = []
        for student_id in student_ids:
            app = Application(
                student_id=student_id,
                scholarship_id=scholarship_id,
                status=status,
                terms_accepted=False,
            )
            if complete:
                app.personal_info = PersonalInfo(
                    first_name_local="Test",
                    last_name_local=student_id,
                    email=f"{student_id}@uni.example",
                    gpa=Decimal("3.20"),
                )
                app.addresses = [Address(address_line="1 College Road")]
                app.education_history = [
                    EducationRecord(education_level="High school", school_name="City School")
                ]
                app.family_members = [
                    FamilyMember(
                        relationship_type=FamilyRelationship.FATHER,
                        first_name="Sam",
                        last_name=student_id,
                    )
                ]
                app.financial_info = FinancialInfo(family_income=Decimal("24000"))
                app.documents = [
                    ApplicationDocument(document_type=DocumentType.ID_CARD),
                    ApplicationDocument(document_type=DocumentType.TRANSCRIPT),
                ]
            applications.append(app)
        session.add_all(applications)
        await session.commit()
        return [app.id for app in applications]


async def seed_slot(
    session_factory,
    scholarship_id: int,
    *,
    max_capacity: int = 1,
    start_hour: int = 9,
    interviewer_id: str = "officer-olivia",
) -> int:
    """Create an open interview slot a week from now. Returns its id."""
    from datetime import time

    from db import InterviewSlot

    async with session_factory() as session:
        slot = InterviewSlot(
            scholarship_id=scholarship_id,
            interviewer_id=interviewer_id,
            interview_date=(datetime.now(UTC) + timedelta(days=7)).date(),
            start_time=time(start_hour, 0),
            end_time=time(start_hour, 30),
            max_capacity=max_capacity,
            current_bookings=0,
            is_available=True,
            created_by=interviewer_id,
        )
        session.add(slot)
        await session.commit()
        return slot.id
