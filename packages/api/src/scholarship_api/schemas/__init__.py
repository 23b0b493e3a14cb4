# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel


class Pagination(BaseModel):
    """Offset-based pagination metadata for list responses."""

    total: int
    offset: int
    limit: int
    has_more: bool


class BulkItemResult(BaseModel):
    """Outcome of one item in a bulk operation."""

    item_id: str
    success: bool
    error: str | None = None


class BulkResult(BaseModel):
    """Per-item outcomes of a bulk operation. Failures never undo successes."""

    succeeded: int
    failed: int
    results: list[BulkItemResult]

    @classmethod
    def from_items(cls, results: list[BulkItemResult]) -> "BulkResult":
        succeeded = sum(1 for r in results if r.success)
        return cls(succeeded=succeeded, failed=len(results) - succeeded, results=results)
