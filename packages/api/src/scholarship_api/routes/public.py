# This project was developed with assistance from AI tools.
"""Public API routes -- no authentication required."""

from fastapi import APIRouter

from ..schemas.scoring import PriorityScoreRequest, PriorityScoreResponse
from ..services.scoring import calculate_priority_score

router = APIRouter()


@router.post("/priority-score", response_model=PriorityScoreResponse)
async def priority_score(req: PriorityScoreRequest) -> PriorityScoreResponse:
    """Estimate an applicant's priority score.

    Calculation: 40% GPA score + 30% financial need score + 30% activity
    score, each on a 0-100 scale, rounded half-up to two decimals.
    """
    return calculate_priority_score(req)
