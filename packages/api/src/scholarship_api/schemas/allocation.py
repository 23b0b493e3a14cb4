# This project was developed with assistance from AI tools.
"""Allocation and budget request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import AllocationStatus, DisbursementMethod
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class AllocationCreate(BaseModel):
    """Commit funds to an approved application."""

    application_id: int
    allocated_amount: Decimal = Field(gt=0, decimal_places=2)
    budget_year: int | None = Field(
        default=None,
        description="Budget year to charge. Defaults to the current calendar year.",
    )
    disbursement_method: DisbursementMethod | None = None
    bank_account: str | None = Field(default=None, max_length=50)
    bank_name: str | None = Field(default=None, max_length=255)
    notes: str | None = None


class ApproveRequest(BaseModel):
    notes: str | None = None


class DisburseRequest(BaseModel):
    transfer_reference: str = Field(min_length=1, max_length=255)
    transfer_date: datetime | None = None


class AllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    scholarship_id: int
    budget_year: int
    allocated_amount: Decimal
    allocation_status: AllocationStatus
    allocation_date: datetime
    disbursement_method: DisbursementMethod | None = None
    bank_account: str | None = None
    bank_name: str | None = None
    transfer_date: datetime | None = None
    transfer_reference: str | None = None
    allocated_by: str
    approved_by: str | None = None
    notes: str | None = None


class AllocationListResponse(BaseModel):
    data: list[AllocationResponse]
    pagination: Pagination


class BudgetCreate(BaseModel):
    budget_year: int = Field(ge=2000, le=2100)
    total_budget: Decimal = Field(ge=0, decimal_places=2)


class BudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    scholarship_id: int
    budget_year: int
    total_budget: Decimal
    allocated_budget: Decimal
    remaining_budget: Decimal


class BudgetSummaryItem(BudgetResponse):
    scholarship_name: str
    allocation_count: int
    utilization_rate: float
    total_quota: int
    available_quota: int


class BudgetSummaryResponse(BaseModel):
    data: list[BudgetSummaryItem]
