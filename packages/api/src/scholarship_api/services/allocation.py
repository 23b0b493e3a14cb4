# This project was developed with assistance from AI tools.
"""Allocation workflow.

Turns an approved application into a funded allocation and walks it
through pending -> approved -> disbursed.

Creation is one transaction: the application row is locked, the
allocation inserted, then budget and quota are reserved through their
ledgers. Any failure rolls all of it back, so a half-made allocation (a
row without its reservation, or a reservation without its row) is never
committed.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from db import Allocation, Application, Budget, Scholarship
from db.database import retry_read
from db.enums import (
    AllocationStatus,
    ApplicationStatus,
    DisbursementMethod,
    NotificationPriority,
    NotificationType,
)
from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.auth import ensure_owner, require_staff
from ..core.errors import ConflictError, NotFoundError
from ..schemas.auth import UserContext
from .audit import write_audit_event
from .ledger import BudgetLedger, BudgetSnapshot, QuotaLedger, to_money
from .notification import notify
from .scope import apply_student_scope

logger = logging.getLogger(__name__)


async def create_allocation(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    amount: Decimal,
    *,
    budget_year: int | None = None,
    disbursement_method: DisbursementMethod | None = None,
    bank_account: str | None = None,
    bank_name: str | None = None,
    notes: str | None = None,
) -> Allocation:
    """Allocate ``amount`` to an approved application.

    Raises:
        NotFoundError: unknown application, or no budget for the year.
        ConflictError: application not approved, or already allocated.
        BudgetExceededError / QuotaExhaustedError: ledger refused.
    """
    require_staff(user, "create_allocation")
    amount = to_money(amount)
    year = budget_year or datetime.now(UTC).year

    try:
        application = (
            await session.execute(
                select(Application).where(Application.id == application_id).with_for_update()
            )
        ).scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")
        if application.status != ApplicationStatus.APPROVED:
            raise ConflictError("Only approved applications can receive an allocation")

        existing = (
            await session.execute(
                select(Allocation.id).where(Allocation.application_id == application_id)
            )
        ).first()
        if existing is not None:
            raise ConflictError("Application already has an allocation")

        allocation = Allocation(
            application_id=application_id,
            scholarship_id=application.scholarship_id,
            budget_year=year,
            allocated_amount=amount,
            allocation_status=AllocationStatus.PENDING,
            disbursement_method=disbursement_method,
            bank_account=bank_account,
            bank_name=bank_name,
            allocated_by=user.user_id,
            notes=notes,
        )
        session.add(allocation)
        await session.flush()

        await BudgetLedger(session, application.scholarship_id, year).reserve(amount)
        await QuotaLedger(session).reserve(application.scholarship_id)

        await write_audit_event(
            session,
            event_type="allocation_created",
            user=user,
            application_id=application_id,
            allocation_id=allocation.id,
            event_data={"amount": str(amount), "budget_year": year},
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Application already has an allocation") from exc
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Allocation %s created: application=%s amount=%s year=%s",
        allocation.id,
        application_id,
        amount,
        year,
    )
    await notify(
        user_id=application.student_id,
        notification_type=NotificationType.ALLOCATION_CREATED,
        title="Scholarship funds allocated",
        message=f"An allocation of {amount} has been recorded for your application.",
        reference_id=allocation.id,
        reference_type="allocation",
        priority=NotificationPriority.HIGH,
    )
    return allocation


async def _explain_miss(session: AsyncSession, allocation_id: int, expected: AllocationStatus) -> None:
    """Log why a conditional allocation update matched no row."""
    status = (
        await session.execute(
            select(Allocation.allocation_status).where(Allocation.id == allocation_id)
        )
    ).scalar_one_or_none()
    if status is None:
        logger.info("Allocation %s does not exist", allocation_id)
    else:
        logger.info(
            "Allocation %s is %s, expected %s", allocation_id, status.value, expected.value
        )


async def approve_allocation(
    session: AsyncSession,
    user: UserContext,
    allocation_id: int,
    notes: str | None = None,
) -> Allocation:
    """Move a pending allocation to approved."""
    require_staff(user, "approve_allocation")
    values = {"allocation_status": AllocationStatus.APPROVED, "approved_by": user.user_id}
    if notes is not None:
        values["notes"] = notes

    result = await session.execute(
        update(Allocation)
        .where(
            Allocation.id == allocation_id,
            Allocation.allocation_status == AllocationStatus.PENDING,
        )
        .values(**values)
        .returning(Allocation)
    )
    allocation = result.scalar_one_or_none()
    if allocation is None:
        await _explain_miss(session, allocation_id, AllocationStatus.PENDING)
        await session.rollback()
        raise ConflictError("Allocation not found or already processed")

    await write_audit_event(
        session,
        event_type="allocation_approved",
        user=user,
        application_id=allocation.application_id,
        allocation_id=allocation_id,
    )
    await session.commit()
    logger.info("Allocation %s approved by %s", allocation_id, user.user_id)
    return allocation


async def disburse_allocation(
    session: AsyncSession,
    user: UserContext,
    allocation_id: int,
    *,
    transfer_reference: str,
    transfer_date: datetime | None = None,
) -> Allocation:
    """Record the transfer of an approved allocation."""
    require_staff(user, "disburse_allocation")
    result = await session.execute(
        update(Allocation)
        .where(
            Allocation.id == allocation_id,
            Allocation.allocation_status == AllocationStatus.APPROVED,
        )
        .values(
            allocation_status=AllocationStatus.DISBURSED,
            transfer_date=transfer_date or datetime.now(UTC),
            transfer_reference=transfer_reference,
        )
        .returning(Allocation)
    )
    allocation = result.scalar_one_or_none()
    if allocation is None:
        await _explain_miss(session, allocation_id, AllocationStatus.APPROVED)
        await session.rollback()
        raise ConflictError("Allocation not found or not approved")

    await write_audit_event(
        session,
        event_type="allocation_disbursed",
        user=user,
        application_id=allocation.application_id,
        allocation_id=allocation_id,
        event_data={"transfer_reference": transfer_reference},
    )
    student_id = (
        await session.execute(
            select(Application.student_id).where(Application.id == allocation.application_id)
        )
    ).scalar_one_or_none()
    await session.commit()
    logger.info("Allocation %s disbursed (%s)", allocation_id, transfer_reference)

    if student_id is not None:
        await notify(
            user_id=student_id,
            notification_type=NotificationType.ALLOCATION_DISBURSED,
            title="Scholarship funds transferred",
            message=f"Your scholarship funds were transferred (reference {transfer_reference}).",
            reference_id=allocation_id,
            reference_type="allocation",
            priority=NotificationPriority.HIGH,
        )
    return allocation


async def get_allocation(
    session: AsyncSession,
    user: UserContext,
    allocation_id: int,
) -> Allocation:
    """Return one allocation; students may only see their own."""

    async def _read() -> Allocation:
        stmt = (
            select(Allocation)
            .options(selectinload(Allocation.application))
            .where(Allocation.id == allocation_id)
        )
        allocation = (await session.execute(stmt)).scalar_one_or_none()
        if allocation is None:
            raise NotFoundError("Allocation not found")
        ensure_owner(user, allocation.application.student_id, "view")
        return allocation

    return await retry_read(_read, session=session)


async def list_allocations(
    session: AsyncSession,
    user: UserContext,
    *,
    filter_status: AllocationStatus | None = None,
    scholarship_id: int | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Allocation], int]:
    """Return allocations visible to the current user, newest first."""

    def _filters(stmt):
        stmt = apply_student_scope(stmt, user, join_to_application=Allocation.application)
        if filter_status is not None:
            stmt = stmt.where(Allocation.allocation_status == filter_status)
        if scholarship_id is not None:
            stmt = stmt.where(Allocation.scholarship_id == scholarship_id)
        return stmt

    async def _read() -> tuple[list[Allocation], int]:
        total = (await session.execute(_filters(select(func.count(Allocation.id))))).scalar() or 0
        stmt = (
            _filters(select(Allocation))
            .order_by(Allocation.allocation_date.desc(), Allocation.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all()), total

    return await retry_read(_read, session=session)


async def budget_summary(
    session: AsyncSession,
    user: UserContext,
    *,
    scholarship_id: int | None = None,
    budget_year: int | None = None,
) -> list[dict]:
    """Per (scholarship, year) budget totals with allocation counts and quota."""
    require_staff(user, "budget_summary")

    counts = (
        select(
            Allocation.scholarship_id,
            Allocation.budget_year,
            func.count(Allocation.id).label("allocation_count"),
        )
        .group_by(Allocation.scholarship_id, Allocation.budget_year)
        .subquery()
    )
    stmt = (
        select(
            Budget,
            Scholarship.name,
            Scholarship.total_quota,
            Scholarship.available_quota,
            func.coalesce(counts.c.allocation_count, 0),
        )
        .join(Scholarship, Scholarship.id == Budget.scholarship_id)
        .outerjoin(
            counts,
            and_(
                counts.c.scholarship_id == Budget.scholarship_id,
                counts.c.budget_year == Budget.budget_year,
            ),
        )
        .order_by(Budget.budget_year.desc(), Scholarship.name)
    )
    if scholarship_id is not None:
        stmt = stmt.where(Budget.scholarship_id == scholarship_id)
    if budget_year is not None:
        stmt = stmt.where(Budget.budget_year == budget_year)

    async def _read() -> list[dict]:
        rows = (await session.execute(stmt)).all()
        summary = []
        for budget, name, total_quota, available_quota, allocation_count in rows:
            snapshot = BudgetSnapshot(
                scholarship_id=budget.scholarship_id,
                budget_year=budget.budget_year,
                total_budget=budget.total_budget,
                allocated_budget=budget.allocated_budget,
                remaining_budget=budget.remaining_budget,
            )
            summary.append(
                {
                    "scholarship_id": budget.scholarship_id,
                    "scholarship_name": name,
                    "budget_year": budget.budget_year,
                    "total_budget": budget.total_budget,
                    "allocated_budget": budget.allocated_budget,
                    "remaining_budget": budget.remaining_budget,
                    "allocation_count": allocation_count,
                    "utilization_rate": snapshot.utilization_rate,
                    "total_quota": total_quota,
                    "available_quota": available_quota,
                }
            )
        return summary

    return await retry_read(_read, session=session)
