# This project was developed with assistance from AI tools.
"""Allocation workflow and budget routes."""

from db import get_db
from db.enums import AllocationStatus, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.allocation import (
    AllocationCreate,
    AllocationListResponse,
    AllocationResponse,
    ApproveRequest,
    BudgetSummaryItem,
    BudgetSummaryResponse,
    DisburseRequest,
)
from ..services import allocation as allocation_service

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.OFFICER)


@router.post(
    "/",
    response_model=AllocationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_allocation(
    body: AllocationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AllocationResponse:
    """Allocate funds to an approved application.

    Reserves budget and quota atomically. Returns 409 "Resource Exhausted"
    when either has run out.
    """
    allocation = await allocation_service.create_allocation(
        session,
        user,
        body.application_id,
        body.allocated_amount,
        budget_year=body.budget_year,
        disbursement_method=body.disbursement_method,
        bank_account=body.bank_account,
        bank_name=body.bank_name,
        notes=body.notes,
    )
    return AllocationResponse.model_validate(allocation)


@router.get(
    "/",
    response_model=AllocationListResponse,
    dependencies=[Depends(require_roles(*_STAFF, UserRole.STUDENT))],
)
async def list_allocations(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: AllocationStatus | None = None,
    scholarship_id: int | None = None,
) -> AllocationListResponse:
    allocations, total = await allocation_service.list_allocations(
        session,
        user,
        filter_status=filter_status,
        scholarship_id=scholarship_id,
        offset=offset,
        limit=limit,
    )
    return AllocationListResponse(
        data=[AllocationResponse.model_validate(a) for a in allocations],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get(
    "/budget-summary",
    response_model=BudgetSummaryResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def budget_summary(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    scholarship_id: int | None = None,
    budget_year: int | None = None,
) -> BudgetSummaryResponse:
    """Budget totals, allocation counts and utilization per scholarship and year."""
    rows = await allocation_service.budget_summary(
        session, user, scholarship_id=scholarship_id, budget_year=budget_year
    )
    return BudgetSummaryResponse(data=[BudgetSummaryItem(**row) for row in rows])


@router.get(
    "/{allocation_id}",
    response_model=AllocationResponse,
    dependencies=[Depends(require_roles(*_STAFF, UserRole.STUDENT))],
)
async def get_allocation(
    allocation_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AllocationResponse:
    allocation = await allocation_service.get_allocation(session, user, allocation_id)
    return AllocationResponse.model_validate(allocation)


@router.post(
    "/{allocation_id}/approve",
    response_model=AllocationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def approve_allocation(
    allocation_id: int,
    user: CurrentUser,
    body: ApproveRequest | None = None,
    session: AsyncSession = Depends(get_db),
) -> AllocationResponse:
    allocation = await allocation_service.approve_allocation(
        session, user, allocation_id, notes=body.notes if body else None
    )
    return AllocationResponse.model_validate(allocation)


@router.post(
    "/{allocation_id}/disburse",
    response_model=AllocationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def disburse_allocation(
    allocation_id: int,
    body: DisburseRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AllocationResponse:
    """Record the bank transfer of an approved allocation."""
    allocation = await allocation_service.disburse_allocation(
        session,
        user,
        allocation_id,
        transfer_reference=body.transfer_reference,
        transfer_date=body.transfer_date,
    )
    return AllocationResponse.model_validate(allocation)
