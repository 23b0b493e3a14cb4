# This project was developed with assistance from AI tools.
"""Scholarship catalogue and budget setup."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from db import Budget, Scholarship
from db.database import retry_read
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import require_staff
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.scholarship import ScholarshipCreate
from .audit import write_audit_event
from .eligibility import EligibilityResult, evaluate, parse_criteria

logger = logging.getLogger(__name__)


async def create_scholarship(
    session: AsyncSession,
    user: UserContext,
    data: ScholarshipCreate,
) -> Scholarship:
    """Create a scholarship with its full quota available."""
    require_staff(user, "create_scholarship")
    criteria = (
        data.eligibility_criteria.model_dump(mode="json", exclude_none=True)
        if data.eligibility_criteria
        else None
    )
    parse_criteria(criteria)  # rejects values evaluation could not use

    scholarship = Scholarship(
        name=data.name,
        scholarship_type=data.scholarship_type,
        description=data.description,
        amount=data.amount,
        total_quota=data.total_quota,
        available_quota=data.total_quota,
        application_start_date=data.application_start_date,
        application_end_date=data.application_end_date,
        eligibility_criteria=criteria,
        required_documents=[d.value for d in data.required_documents],
        is_active=True,
        created_by=user.user_id,
    )
    session.add(scholarship)
    await session.flush()
    await write_audit_event(
        session,
        event_type="scholarship_created",
        user=user,
        event_data={"scholarship_id": scholarship.id, "total_quota": data.total_quota},
    )
    await session.commit()
    logger.info("Scholarship %s created by %s", scholarship.id, user.user_id)
    return scholarship


async def get_scholarship(session: AsyncSession, scholarship_id: int) -> Scholarship:
    async def _read() -> Scholarship:
        scholarship = await session.get(Scholarship, scholarship_id)
        if scholarship is None:
            raise NotFoundError("Scholarship not found")
        return scholarship

    return await retry_read(_read, session=session)


async def list_scholarships(
    session: AsyncSession,
    *,
    open_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Scholarship], int]:
    """Return active scholarships; ``open_only`` keeps those accepting applications now."""
    filters = [Scholarship.is_active.is_(True)]
    if open_only:
        now = datetime.now(UTC)
        filters += [
            Scholarship.application_start_date <= now,
            Scholarship.application_end_date >= now,
            Scholarship.available_quota > 0,
        ]

    async def _read() -> tuple[list[Scholarship], int]:
        total = (
            await session.execute(select(func.count(Scholarship.id)).where(*filters))
        ).scalar() or 0
        stmt = (
            select(Scholarship)
            .where(*filters)
            .order_by(Scholarship.application_end_date.asc(), Scholarship.id)
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    return await retry_read(_read, session=session)


async def create_budget(
    session: AsyncSession,
    user: UserContext,
    scholarship_id: int,
    budget_year: int,
    total_budget: Decimal,
) -> Budget:
    """Open the budget of a scholarship for one year. One budget per year."""
    require_staff(user, "create_budget")
    if total_budget < 0:
        raise ValidationError("Invalid budget", ["Total budget cannot be negative"])
    if await session.get(Scholarship, scholarship_id) is None:
        raise NotFoundError("Scholarship not found")

    budget = Budget(
        scholarship_id=scholarship_id,
        budget_year=budget_year,
        total_budget=total_budget,
        allocated_budget=Decimal("0"),
        remaining_budget=total_budget,
    )
    session.add(budget)
    try:
        await session.flush()
        await write_audit_event(
            session,
            event_type="budget_created",
            user=user,
            event_data={
                "scholarship_id": scholarship_id,
                "budget_year": budget_year,
                "total_budget": str(total_budget),
            },
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("A budget already exists for this scholarship and year") from exc

    logger.info("Budget %s/%s opened with %s", scholarship_id, budget_year, total_budget)
    return budget


async def check_eligibility(
    session: AsyncSession,
    scholarship_id: int,
    student_data: dict,
) -> EligibilityResult:
    """Evaluate declared student attributes against a scholarship's criteria."""
    scholarship = await get_scholarship(session, scholarship_id)
    return evaluate(parse_criteria(scholarship.eligibility_criteria), student_data)
