# This project was developed with assistance from AI tools.
"""Domain error taxonomy.

Services raise these; ``main.py`` renders them as RFC 7807 Problem Details.
Messages are user-visible and must not carry internal identifiers.
"""


class ScholarshipError(Exception):
    """Base class for expected, typed failures of the lifecycle core."""

    status_code = 400
    title = "Bad Request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScholarshipError):
    """Malformed input or incomplete data. Carries every violated rule."""

    status_code = 422
    title = "Unprocessable Entity"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class NotFoundError(ScholarshipError):
    status_code = 404
    title = "Not Found"


class ForbiddenError(ScholarshipError):
    status_code = 403
    title = "Forbidden"


class ConflictError(ScholarshipError):
    """Wrong current state, lost race, or uniqueness violation."""

    status_code = 409
    title = "Conflict"


class InvalidTransitionError(ConflictError):
    """Raised when a status transition is not in the allowed set."""


class ExhaustedResourceError(ScholarshipError):
    """A ledger reservation failed because capacity is gone."""

    status_code = 409
    title = "Resource Exhausted"


class QuotaExhaustedError(ExhaustedResourceError):
    pass


class BudgetExceededError(ExhaustedResourceError):
    pass


class SlotFullError(ExhaustedResourceError):
    """An interview slot has no seats left."""
