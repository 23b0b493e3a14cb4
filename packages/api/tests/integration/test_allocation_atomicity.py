# This project was developed with assistance from AI tools.
"""A refused reservation leaves no trace: no allocation, no ledger change."""

from decimal import Decimal

import pytest
from db import Allocation, Budget, Scholarship
from db.enums import ApplicationStatus
from sqlalchemy import func, select

from scholarship_api.core.errors import BudgetExceededError, QuotaExhaustedError
from scholarship_api.services.allocation import create_allocation

from ..functional.personas import officer
from .seed import seed_applications, seed_scholarship

pytestmark = pytest.mark.integration


async def _state(session_factory, scholarship_id):
    async with session_factory() as session:
        allocations = (await session.execute(select(func.count(Allocation.id)))).scalar()
        scholarship = await session.get(Scholarship, scholarship_id)
        budget = (
            await session.execute(select(Budget).where(Budget.scholarship_id == scholarship_id))
        ).scalar_one()
        return allocations, scholarship.available_quota, budget.allocated_budget


async def test_budget_refusal_rolls_back_allocation_and_quota(session_factory):
    scholarship_id = await seed_scholarship(session_factory, total_quota=3, total_budget="1000.00")
    (application_id,) = await seed_applications(
        session_factory, scholarship_id, ["stu-alice"], ApplicationStatus.APPROVED
    )

    async with session_factory() as session:
        with pytest.raises(BudgetExceededError):
            await create_allocation(session, officer(), application_id, "5000", budget_year=2026)

    assert await _state(session_factory, scholarship_id) == (0, 3, Decimal("0.00"))


async def test_quota_refusal_rolls_back_budget_reservation(session_factory):
    scholarship_id = await seed_scholarship(session_factory, total_quota=1, available_quota=0)
    (application_id,) = await seed_applications(
        session_factory, scholarship_id, ["stu-alice"], ApplicationStatus.APPROVED
    )

    async with session_factory() as session:
        with pytest.raises(QuotaExhaustedError):
            await create_allocation(session, officer(), application_id, "5000", budget_year=2026)

    assert await _state(session_factory, scholarship_id) == (0, 0, Decimal("0.00"))


async def test_successful_allocation_moves_both_ledgers(session_factory):
    scholarship_id = await seed_scholarship(session_factory, total_quota=3)
    (application_id,) = await seed_applications(
        session_factory, scholarship_id, ["stu-alice"], ApplicationStatus.APPROVED
    )

    async with session_factory() as session:
        await create_allocation(session, officer(), application_id, "5000", budget_year=2026)

    assert await _state(session_factory, scholarship_id) == (1, 2, Decimal("5000.00"))
