# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime

from db.enums import ApplicationStatus
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination
from .document import DocumentResponse
from .section import (
    ActivityData,
    AddressData,
    AssetData,
    EducationData,
    FamilyMemberData,
    FinancialInfoData,
    PersonalInfoData,
    ReferenceData,
)


class ApplicationCreate(BaseModel):
    """Open a draft application for a scholarship."""

    scholarship_id: int
    application_data: dict | None = None


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: str
    scholarship_id: int
    status: ApplicationStatus
    reference_number: str | None = None
    terms_accepted: bool = False
    application_data: dict | None = None
    submitted_at: datetime | None = None
    review_notes: str | None = None
    reviewer_id: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationDetailResponse(ApplicationResponse):
    """Application with every section record."""

    personal_info: PersonalInfoData | None = None
    addresses: list[AddressData] = []
    education_history: list[EducationData] = []
    family_members: list[FamilyMemberData] = []
    financial_info: FinancialInfoData | None = None
    assets: list[AssetData] = []
    activities: list[ActivityData] = []
    references: list[ReferenceData] = []
    documents: list[DocumentResponse] = []


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class SubmitRequest(BaseModel):
    terms_accepted: bool = False
    declaration_accepted: bool = False


class ReviewRequest(BaseModel):
    """Reviewer decision. ``status`` must be one of the review statuses."""

    status: ApplicationStatus
    review_notes: str | None = Field(default=None, max_length=5000)


class ApplicationStatsResponse(BaseModel):
    total: int
    by_status: dict[str, int]
    overdue: int = Field(description="Submitted applications waiting longer than the review window.")
