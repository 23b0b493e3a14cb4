# This project was developed with assistance from AI tools.
"""Health check schema."""

from pydantic import BaseModel


class HealthItem(BaseModel):
    name: str
    status: str
    message: str
    version: str | None = None
