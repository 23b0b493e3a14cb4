# This project was developed with assistance from AI tools.
"""Priority score and eligibility check schemas."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class PriorityScoreRequest(BaseModel):
    gpa: float = Field(description="Cumulative GPA on a 4.00 scale.")
    family_income: Decimal = Field(description="Declared yearly family income.")
    activity_count: int = Field(default=0, description="Extracurricular activities.")


class PriorityScoreResponse(BaseModel):
    """Weighted composite score with its components."""

    total_score: float
    gpa_score: float
    financial_score: float
    activity_score: float
    score_level: str
    recommendations: list[str] = []


class EligibilityCheckRequest(BaseModel):
    """Declared student attributes checked against a scholarship's criteria.

    Omitted fields are reported as missing rather than failing the check.
    """

    gpa: float | None = None
    family_income: Decimal | None = None
    faculty: str | None = None
    year_level: int | None = None


class CriterionResultItem(BaseModel):
    criterion: str
    required: Any
    actual: Any
    passed: bool


class EligibilityCheckResponse(BaseModel):
    scholarship_id: int
    is_eligible: bool
    eligibility_score: float
    criteria_results: list[CriterionResultItem]
    missing_fields: list[str]
