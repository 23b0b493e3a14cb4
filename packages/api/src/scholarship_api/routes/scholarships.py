# This project was developed with assistance from AI tools.
"""Scholarship catalogue routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.allocation import BudgetCreate, BudgetResponse
from ..schemas.scholarship import (
    ScholarshipCreate,
    ScholarshipListResponse,
    ScholarshipResponse,
)
from ..schemas.scoring import EligibilityCheckRequest, EligibilityCheckResponse
from ..services import scholarship as scholarship_service
from ..services.screening import eligibility_response

router = APIRouter()

_ALL_ROLES = (UserRole.ADMIN, UserRole.OFFICER, UserRole.STUDENT)
_STAFF = (UserRole.ADMIN, UserRole.OFFICER)


@router.get(
    "/",
    response_model=ScholarshipListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_scholarships(
    session: AsyncSession = Depends(get_db),
    open_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ScholarshipListResponse:
    """List active scholarships, optionally only those open for applications."""
    scholarships, total = await scholarship_service.list_scholarships(
        session, open_only=open_only, offset=offset, limit=limit
    )
    return ScholarshipListResponse(
        data=[ScholarshipResponse.model_validate(s) for s in scholarships],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.post(
    "/",
    response_model=ScholarshipResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_scholarship(
    body: ScholarshipCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ScholarshipResponse:
    scholarship = await scholarship_service.create_scholarship(session, user, body)
    return ScholarshipResponse.model_validate(scholarship)


@router.get(
    "/{scholarship_id}",
    response_model=ScholarshipResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_scholarship(
    scholarship_id: int,
    session: AsyncSession = Depends(get_db),
) -> ScholarshipResponse:
    scholarship = await scholarship_service.get_scholarship(session, scholarship_id)
    return ScholarshipResponse.model_validate(scholarship)


@router.post(
    "/{scholarship_id}/budgets",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_budget(
    scholarship_id: int,
    body: BudgetCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BudgetResponse:
    """Open the yearly budget of a scholarship. One budget per year."""
    budget = await scholarship_service.create_budget(
        session, user, scholarship_id, body.budget_year, body.total_budget
    )
    return BudgetResponse.model_validate(budget)


@router.post(
    "/{scholarship_id}/eligibility",
    response_model=EligibilityCheckResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def check_eligibility(
    scholarship_id: int,
    body: EligibilityCheckRequest,
    session: AsyncSession = Depends(get_db),
) -> EligibilityCheckResponse:
    """Check declared attributes against the scholarship criteria.

    Attributes left out of the request are reported as missing rather
    than failing the check.
    """
    result = await scholarship_service.check_eligibility(
        session, scholarship_id, body.model_dump(exclude_none=True)
    )
    return eligibility_response(scholarship_id, result)
