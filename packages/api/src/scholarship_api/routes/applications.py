# This project was developed with assistance from AI tools.
"""Application lifecycle routes with RBAC enforcement.

Ownership and status rules live in the service layer; these handlers only
translate HTTP to service calls. Domain errors propagate to the RFC 7807
handlers in ``main.py``.
"""

from typing import Any

from db import get_db
from db.enums import ApplicationStatus, UserRole
from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatsResponse,
    ReviewRequest,
    SubmitRequest,
)
from ..schemas.audit import AuditByApplicationResponse, AuditEventItem
from ..schemas.document import DocumentCreate, DocumentResponse
from ..schemas.scoring import EligibilityCheckResponse, PriorityScoreResponse
from ..services import application as app_service
from ..services import document as doc_service
from ..services import screening
from ..services.audit import get_events_for_application
from ..services.sections import parse_section, save_section

router = APIRouter()

_ALL_ROLES = (UserRole.ADMIN, UserRole.OFFICER, UserRole.STUDENT)
_STAFF = (UserRole.ADMIN, UserRole.OFFICER)


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: ApplicationStatus | None = None,
    scholarship_id: int | None = None,
) -> ApplicationListResponse:
    """List applications visible to the caller. Students see only their own."""
    applications, total = await app_service.list_applications(
        session,
        user,
        offset=offset,
        limit=limit,
        filter_status=filter_status,
        scholarship_id=scholarship_id,
    )
    return ApplicationListResponse(
        data=[ApplicationResponse.model_validate(app) for app in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.STUDENT))],
)
async def create_application(
    body: ApplicationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Open a draft application. Students only."""
    app = await app_service.create_application(
        session, user, body.scholarship_id, body.application_data
    )
    return ApplicationResponse.model_validate(app)


@router.get(
    "/stats",
    response_model=ApplicationStatsResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def application_stats(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationStatsResponse:
    """Counts per status and the number of submissions overdue for review."""
    return ApplicationStatsResponse(**await app_service.application_stats(session, user))


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationDetailResponse:
    """Get a single application with every section."""
    app = await app_service.get_application(session, user, application_id)
    return ApplicationDetailResponse.model_validate(app)


@router.delete(
    "/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def delete_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete an application. Students may delete drafts only."""
    await app_service.delete_application(session, user, application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{application_id}/sections/{section}",
    response_model=ApplicationDetailResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def update_section(
    application_id: int,
    section: str,
    user: CurrentUser,
    payload: Any = Body(...),
    session: AsyncSession = Depends(get_db),
) -> ApplicationDetailResponse:
    """Save one section of a draft application.

    List sections (addresses, education, family, assets, activities,
    references) take a JSON array and replace the stored records. Single
    sections (personal_info, financial_info) take an object.
    """
    data = parse_section(section, payload)
    app = await save_section(session, user, application_id, section, data)
    return ApplicationDetailResponse.model_validate(app)


@router.get(
    "/{application_id}/documents",
    response_model=list[DocumentResponse],
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_documents(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[DocumentResponse]:
    documents = await doc_service.list_documents(session, user, application_id)
    return [DocumentResponse.model_validate(doc) for doc in documents]


@router.post(
    "/{application_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def add_document(
    application_id: int,
    body: DocumentCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentResponse:
    """Record an uploaded document's metadata."""
    document = await doc_service.add_document(
        session, user, application_id, body.document_type, body.file_path
    )
    return DocumentResponse.model_validate(document)


@router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def submit_application(
    application_id: int,
    body: SubmitRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Submit a draft. A 422 response lists every missing requirement."""
    app = await app_service.submit_application(
        session,
        user,
        application_id,
        terms_accepted=body.terms_accepted,
        declaration_accepted=body.declaration_accepted,
    )
    return ApplicationResponse.model_validate(app)


@router.post(
    "/{application_id}/review",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def review_application(
    application_id: int,
    body: ReviewRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Record a review decision. Admins and officers only."""
    app = await app_service.review_application(
        session,
        user,
        application_id,
        new_status=body.status,
        review_notes=body.review_notes,
    )
    return ApplicationResponse.model_validate(app)


@router.post(
    "/{application_id}/complete",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def complete_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Close an approved application after its funds were disbursed."""
    app = await app_service.complete_application(session, user, application_id)
    return ApplicationResponse.model_validate(app)


@router.get(
    "/{application_id}/eligibility",
    response_model=EligibilityCheckResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def application_eligibility(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> EligibilityCheckResponse:
    """Check the application's declared data against the scholarship criteria."""
    return await screening.application_eligibility(session, user, application_id)


@router.get(
    "/{application_id}/priority-score",
    response_model=PriorityScoreResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def application_priority(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> PriorityScoreResponse:
    return await screening.application_priority(session, user, application_id)


@router.get(
    "/{application_id}/audit",
    response_model=AuditByApplicationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def application_audit(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AuditByApplicationResponse:
    """Audit trail of one application, oldest first."""
    events = await get_events_for_application(session, application_id)
    return AuditByApplicationResponse(
        application_id=application_id,
        count=len(events),
        events=[AuditEventItem.model_validate(e) for e in events],
    )
