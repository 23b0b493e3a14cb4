# This project was developed with assistance from AI tools.
"""Draft section editor.

Saves application sections while the application is still a draft.
Single-record sections (personal info, financial info) are upserted; list
sections are replaced wholesale. The application row is locked for the
duration so an edit cannot interleave with a concurrent submit.
"""

import logging
from dataclasses import dataclass

from db import (
    Activity,
    Address,
    Application,
    Asset,
    EducationRecord,
    FamilyMember,
    FinancialInfo,
    PersonalInfo,
    Reference,
)
from db.enums import ApplicationStatus
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.section import (
    ActivityData,
    AddressData,
    AssetData,
    EducationData,
    FamilyMemberData,
    FinancialInfoData,
    PersonalInfoData,
    ReferenceData,
)
from .application import load_application

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionSpec:
    attribute: str
    model: type
    schema: type[BaseModel]
    many: bool


SECTIONS: dict[str, SectionSpec] = {
    "personal_info": SectionSpec("personal_info", PersonalInfo, PersonalInfoData, many=False),
    "addresses": SectionSpec("addresses", Address, AddressData, many=True),
    "education": SectionSpec("education_history", EducationRecord, EducationData, many=True),
    "family": SectionSpec("family_members", FamilyMember, FamilyMemberData, many=True),
    "financial_info": SectionSpec("financial_info", FinancialInfo, FinancialInfoData, many=False),
    "assets": SectionSpec("assets", Asset, AssetData, many=True),
    "activities": SectionSpec("activities", Activity, ActivityData, many=True),
    "references": SectionSpec("references", Reference, ReferenceData, many=True),
}


def parse_section(section: str, payload) -> list[BaseModel] | BaseModel:
    """Validate a raw section payload against its schema.

    Raises ValidationError for unknown sections or malformed payloads.
    """
    spec = SECTIONS.get(section)
    if spec is None:
        raise ValidationError(
            "Unknown section",
            [f"Section must be one of: {', '.join(sorted(SECTIONS))}"],
        )
    try:
        if spec.many:
            if not isinstance(payload, list):
                raise ValidationError(
                    "Invalid section payload", [f"Section '{section}' expects a list"]
                )
            return [spec.schema.model_validate(item) for item in payload]
        if not isinstance(payload, dict):
            raise ValidationError(
                "Invalid section payload", [f"Section '{section}' expects an object"]
            )
        return spec.schema.model_validate(payload)
    except SchemaError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise ValidationError("Invalid section payload", errors) from exc


async def save_section(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    section: str,
    data: list[BaseModel] | BaseModel,
) -> Application:
    """Write one section of a draft application and return the application."""
    spec = SECTIONS[section]
    application = await load_application(
        session, user, application_id, action="edit", with_sections=True, for_update=True
    )
    if application.status != ApplicationStatus.DRAFT:
        raise ConflictError("Only draft applications can be edited")

    if spec.many:
        setattr(
            application,
            spec.attribute,
            [spec.model(**item.model_dump()) for item in data],
        )
    else:
        values = data.model_dump()
        existing = getattr(application, spec.attribute)
        if existing is None:
            setattr(application, spec.attribute, spec.model(**values))
        else:
            for field, value in values.items():
                setattr(existing, field, value)

    await session.commit()
    logger.info("Saved section %s of application %s", section, application_id)
    return application
