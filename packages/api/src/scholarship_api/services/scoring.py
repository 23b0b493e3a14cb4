# This project was developed with assistance from AI tools.
"""Priority score calculation.

Pure math, no I/O. Shared by the public calculator route and the
application ranking views.

Weights: GPA 40%, financial need 30%, activities 30%.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..core.errors import ValidationError
from ..schemas.scoring import PriorityScoreRequest, PriorityScoreResponse

GPA_WEIGHT = 0.4
FINANCIAL_WEIGHT = 0.3
ACTIVITY_WEIGHT = 0.3

_INCOME_FLOOR = 15_000.0
_INCOME_CEILING = 50_000.0

# (threshold, label), checked top-down
_SCORE_LEVELS = (
    (80.0, "very high"),
    (60.0, "high"),
    (40.0, "medium"),
)


def round2(value: float) -> float:
    """Round half-up to two decimals (not banker's rounding, not truncation)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def gpa_score(gpa: float) -> float:
    """100 at GPA 4.00, 50 at GPA 2.00 or below, linear between."""
    if gpa >= 4.0:
        return 100.0
    if gpa <= 2.0:
        return 50.0
    return 50.0 + (gpa - 2.0) / 2.0 * 50.0


def financial_score(family_income: float) -> float:
    """Inverse of income: 100 at 15,000 or below, 20 at 50,000 or above."""
    if family_income <= _INCOME_FLOOR:
        return 100.0
    if family_income >= _INCOME_CEILING:
        return 20.0
    return 100.0 - (family_income - _INCOME_FLOOR) / (_INCOME_CEILING - _INCOME_FLOOR) * 80.0


def activity_score(activity_count: int) -> float:
    return float(min(activity_count * 20, 100))


def score_level(total: float) -> str:
    for threshold, label in _SCORE_LEVELS:
        if total >= threshold:
            return label
    return "low"


def priority_score(gpa: float, family_income: float, activity_count: int) -> float:
    """Weighted composite score, rounded to two decimals."""
    total = (
        gpa_score(gpa) * GPA_WEIGHT
        + financial_score(family_income) * FINANCIAL_WEIGHT
        + activity_score(activity_count) * ACTIVITY_WEIGHT
    )
    return round2(total)


def _recommendations(gpa: float, income: float, activities: int, total: float) -> list[str]:
    recommendations = []
    if gpa < 3.0:
        recommendations.append("Raise your cumulative GPA to improve your chances.")
    if activities < 3:
        recommendations.append("Join more extracurricular activities to increase your score.")
    if income > 30_000:
        recommendations.append("Consider merit-based scholarships rather than need-based ones.")
    if total < 60:
        recommendations.append("Improve academic results and activity record before applying.")
    if not recommendations:
        recommendations.append("Your score is in good standing; you can apply with confidence.")
    return recommendations


def validate_score_inputs(gpa: float, family_income: float, activity_count: int) -> None:
    errors = []
    if gpa < 0 or gpa > 4:
        errors.append("GPA must be between 0.00 and 4.00")
    if family_income < 0:
        errors.append("Family income cannot be negative")
    if activity_count < 0:
        errors.append("Activity count cannot be negative")
    if errors:
        raise ValidationError("Invalid score inputs", errors)


def calculate_priority_score(req: PriorityScoreRequest) -> PriorityScoreResponse:
    """Compute the full score breakdown for a calculator request."""
    income = float(req.family_income)
    validate_score_inputs(req.gpa, income, req.activity_count)

    total = priority_score(req.gpa, income, req.activity_count)
    return PriorityScoreResponse(
        total_score=total,
        gpa_score=round2(gpa_score(req.gpa)),
        financial_score=round2(financial_score(income)),
        activity_score=activity_score(req.activity_count),
        score_level=score_level(total),
        recommendations=_recommendations(req.gpa, income, req.activity_count, total),
    )
