# This project was developed with assistance from AI tools.
"""Application document schemas."""

from datetime import datetime

from db.enums import DocumentType, VerificationStatus
from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    """Metadata of an uploaded document. File bytes live in external storage."""

    document_type: DocumentType
    file_path: str | None = Field(default=None, max_length=500)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    document_type: DocumentType
    file_path: str | None = None
    verification_status: VerificationStatus
    verified_by: str | None = None
    verified_at: datetime | None = None
    created_at: datetime


class DocumentVerification(BaseModel):
    document_id: int
    status: VerificationStatus


class BulkVerifyRequest(BaseModel):
    items: list[DocumentVerification] = Field(min_length=1)
