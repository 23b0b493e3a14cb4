# This project was developed with assistance from AI tools.
"""Health check routes."""

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends

from .. import __version__
from ..schemas.health import HealthItem

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health(db_service: DatabaseService = Depends(get_db_service)) -> list[HealthItem]:
    """Report API and database health. No authentication required."""
    db_ok = await db_service.health_check()
    return [
        HealthItem(name="API", status="healthy", message="API is running", version=__version__),
        HealthItem(
            name="Database",
            status="healthy" if db_ok else "unhealthy",
            message="PostgreSQL reachable" if db_ok else "PostgreSQL unreachable",
        ),
    ]
