# This project was developed with assistance from AI tools.
"""Application document metadata and verification.

File bytes live in external storage; this service records which documents
exist for an application and their verification status.
"""

import logging
from datetime import UTC, datetime

from db import Application, ApplicationDocument
from db.enums import ApplicationStatus, DocumentType, NotificationType, VerificationStatus
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import require_staff
from ..core.config import settings
from ..core.errors import ConflictError, NotFoundError, ScholarshipError, ValidationError
from ..schemas import BulkItemResult, BulkResult
from ..schemas.auth import UserContext
from ..schemas.document import DocumentVerification
from .application import load_application
from .notification import notify

logger = logging.getLogger(__name__)


async def add_document(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    document_type: DocumentType,
    file_path: str | None = None,
) -> ApplicationDocument:
    """Record an uploaded document against an application."""
    application = await load_application(session, user, application_id, action="upload to")
    if not user.is_staff and application.status != ApplicationStatus.DRAFT:
        raise ConflictError("Documents can no longer be added to this application")

    document = ApplicationDocument(
        application_id=application_id,
        document_type=document_type,
        file_path=file_path,
        verification_status=VerificationStatus.PENDING,
        uploaded_by=user.user_id,
    )
    session.add(document)
    await session.commit()
    logger.info("Document %s (%s) added to application %s", document.id, document_type.value, application_id)
    return document


async def list_documents(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> list[ApplicationDocument]:
    await load_application(session, user, application_id)
    stmt = (
        select(ApplicationDocument)
        .where(ApplicationDocument.application_id == application_id)
        .order_by(ApplicationDocument.created_at, ApplicationDocument.id)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _verify_one(
    session: AsyncSession,
    user: UserContext,
    item: DocumentVerification,
    now: datetime,
) -> str:
    """Apply one verification inside its own savepoint. Returns the student id."""
    async with session.begin_nested():
        row = (
            await session.execute(
                select(ApplicationDocument, Application.student_id)
                .join(Application, Application.id == ApplicationDocument.application_id)
                .where(ApplicationDocument.id == item.document_id)
            )
        ).one_or_none()
        if row is None:
            raise NotFoundError("Document not found")
        document, student_id = row
        document.verification_status = item.status
        document.verified_by = user.user_id
        document.verified_at = now
        await session.flush()
    return student_id


async def verify_documents(
    session: AsyncSession,
    user: UserContext,
    items: list[DocumentVerification],
) -> BulkResult:
    """Set the verification status of many documents.

    Each document is updated in its own savepoint; a failed item is reported
    and never undoes the items before it.
    """
    require_staff(user, "verify_documents")
    if len(items) > settings.BULK_MAX_ITEMS:
        raise ValidationError(
            "Too many documents",
            [f"At most {settings.BULK_MAX_ITEMS} documents per request"],
        )

    now = datetime.now(UTC)
    results: list[BulkItemResult] = []
    students: set[str] = set()
    for item in items:
        item_id = str(item.document_id)
        try:
            students.add(await _verify_one(session, user, item, now))
        except ScholarshipError as exc:
            results.append(BulkItemResult(item_id=item_id, success=False, error=exc.message))
            continue
        except SQLAlchemyError:
            logger.warning("Verification of document %s failed", item.document_id, exc_info=True)
            results.append(BulkItemResult(item_id=item_id, success=False, error="Update failed"))
            continue
        results.append(BulkItemResult(item_id=item_id, success=True))

    await session.commit()
    outcome = BulkResult.from_items(results)
    logger.info(
        "Document verification by %s: %d updated, %d failed",
        user.user_id,
        outcome.succeeded,
        outcome.failed,
    )

    for student_id in sorted(students):
        await notify(
            user_id=student_id,
            notification_type=NotificationType.DOCUMENT_VERIFIED,
            title="Documents reviewed",
            message="Staff reviewed documents on your scholarship application.",
            reference_type="document",
        )
    return outcome
