# This project was developed with assistance from AI tools.
"""Application section schemas.

The same models serve as draft-editor request bodies and as the nested
section payloads of the application detail response.
"""

from datetime import datetime
from decimal import Decimal

from db.enums import AddressType, FamilyRelationship
from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PersonalInfoData(_Section):
    prefix: str | None = None
    first_name_local: str | None = None
    last_name_local: str | None = None
    first_name_en: str | None = None
    last_name_en: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: datetime | None = None
    faculty: str | None = None
    department: str | None = None
    year_level: int | None = Field(default=None, ge=1, le=8)
    gpa: Decimal | None = Field(default=None, ge=0, le=4)


class AddressData(_Section):
    address_type: AddressType = AddressType.PERMANENT
    address_line: str = Field(min_length=1)
    subdistrict: str | None = None
    district: str | None = None
    province: str | None = None
    postal_code: str | None = None


class EducationData(_Section):
    education_level: str = Field(min_length=1)
    school_name: str = Field(min_length=1)
    gpa: Decimal | None = Field(default=None, ge=0, le=4)
    graduation_year: int | None = None


class FamilyMemberData(_Section):
    relationship_type: FamilyRelationship
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    occupation: str | None = None
    monthly_income: Decimal | None = Field(default=None, ge=0)
    is_alive: bool = True


class FinancialInfoData(_Section):
    family_income: Decimal | None = Field(default=None, ge=0)
    monthly_allowance: Decimal | None = Field(default=None, ge=0)
    monthly_expenses: Decimal | None = Field(default=None, ge=0)
    debts: Decimal | None = Field(default=None, ge=0)
    siblings_count: int | None = Field(default=None, ge=0)
    has_student_loan: bool = False


class AssetData(_Section):
    asset_type: str = Field(min_length=1)
    description: str | None = None
    estimated_value: Decimal | None = Field(default=None, ge=0)


class ActivityData(_Section):
    activity_name: str = Field(min_length=1)
    role: str | None = None
    hours: float | None = Field(default=None, ge=0)
    year: int | None = None


class ReferenceData(_Section):
    name: str = Field(min_length=1)
    position: str | None = None
    organization: str | None = None
    phone: str | None = None
    email: str | None = None
