# This project was developed with assistance from AI tools.
"""Document verification routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import BulkResult
from ..schemas.document import BulkVerifyRequest
from ..services.document import verify_documents

router = APIRouter()


@router.post(
    "/verify",
    response_model=BulkResult,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.OFFICER))],
)
async def bulk_verify(
    body: BulkVerifyRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    """Set the verification status of many documents.

    Items are applied independently; the response reports each outcome.
    """
    return await verify_documents(session, user, body.items)
