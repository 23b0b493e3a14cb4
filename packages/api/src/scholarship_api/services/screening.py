# This project was developed with assistance from AI tools.
"""Eligibility and priority screening of stored applications.

Reads the student's declared attributes out of the application sections
and feeds them to the pure eligibility and scoring functions.
"""

from db import Application
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ValidationError
from ..schemas.auth import UserContext
from ..schemas.scoring import (
    CriterionResultItem,
    EligibilityCheckResponse,
    PriorityScoreRequest,
    PriorityScoreResponse,
)
from .application import load_application
from .eligibility import EligibilityResult
from .scholarship import check_eligibility
from .scoring import calculate_priority_score


def student_profile(application: Application) -> dict:
    """Declared attributes used by eligibility and scoring. Absent ones are None."""
    personal = application.personal_info
    financial = application.financial_info
    return {
        "gpa": personal.gpa if personal else None,
        "faculty": personal.faculty if personal else None,
        "year_level": personal.year_level if personal else None,
        "family_income": financial.family_income if financial else None,
        "activity_count": len(application.activities or []),
    }


def eligibility_response(scholarship_id: int, result: EligibilityResult) -> EligibilityCheckResponse:
    return EligibilityCheckResponse(
        scholarship_id=scholarship_id,
        is_eligible=result.is_eligible,
        eligibility_score=result.score,
        criteria_results=[
            CriterionResultItem(
                criterion=r.criterion, required=r.required, actual=r.actual, passed=r.passed
            )
            for r in result.criteria_results
        ],
        missing_fields=list(result.missing_fields),
    )


async def application_eligibility(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> EligibilityCheckResponse:
    """Check a stored application's declared data against its scholarship's criteria."""
    application = await load_application(session, user, application_id, with_sections=True)
    result = await check_eligibility(
        session, application.scholarship_id, student_profile(application)
    )
    return eligibility_response(application.scholarship_id, result)


async def application_priority(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> PriorityScoreResponse:
    """Priority score of a stored application.

    Raises ValidationError naming the sections still needed for scoring.
    """
    application = await load_application(session, user, application_id, with_sections=True)
    profile = student_profile(application)

    errors = []
    if profile["gpa"] is None:
        errors.append("GPA is required for scoring")
    if profile["family_income"] is None:
        errors.append("Family income is required for scoring")
    if errors:
        raise ValidationError("Application cannot be scored yet", errors)

    return calculate_priority_score(
        PriorityScoreRequest(
            gpa=float(profile["gpa"]),
            family_income=profile["family_income"],
            activity_count=profile["activity_count"],
        )
    )
