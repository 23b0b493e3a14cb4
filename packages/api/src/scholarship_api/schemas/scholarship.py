# This project was developed with assistance from AI tools.
"""Scholarship request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import DocumentType
from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import Pagination


class EligibilityCriteria(BaseModel):
    """Known criteria keys. Omitted criteria are not checked."""

    min_gpa: float | None = Field(default=None, ge=0, le=4)
    max_family_income: Decimal | None = Field(default=None, ge=0)
    allowed_faculties: list[str] | None = None
    min_year_level: int | None = Field(default=None, ge=1)


class ScholarshipCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    scholarship_type: str | None = None
    description: str | None = None
    amount: Decimal = Field(gt=0, decimal_places=2)
    total_quota: int = Field(ge=0)
    application_start_date: datetime
    application_end_date: datetime
    eligibility_criteria: EligibilityCriteria | None = None
    required_documents: list[DocumentType] = []

    @model_validator(mode="after")
    def _check_window(self):
        if self.application_end_date <= self.application_start_date:
            raise ValueError("application_end_date must be after application_start_date")
        return self


class ScholarshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    scholarship_type: str | None = None
    description: str | None = None
    amount: Decimal
    total_quota: int
    available_quota: int
    application_start_date: datetime
    application_end_date: datetime
    eligibility_criteria: dict | None = None
    required_documents: list[str] | None = None
    is_active: bool


class ScholarshipListResponse(BaseModel):
    data: list[ScholarshipResponse]
    pagination: Pagination
