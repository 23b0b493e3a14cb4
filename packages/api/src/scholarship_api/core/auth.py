# This project was developed with assistance from AI tools.
"""Pure authorization checks with no FastAPI or HTTP dependencies.

Services call these directly so that role and ownership rules hold no
matter which entry point (route, script, test) invoked the operation.
"""

import logging

from db.enums import UserRole

from ..schemas.auth import UserContext
from .errors import ForbiddenError

logger = logging.getLogger(__name__)


def require_staff(user: UserContext, action: str) -> None:
    """Raise ForbiddenError unless the caller holds an admin or officer role."""
    if not user.is_staff:
        logger.warning(
            "RBAC denied: user=%s role=%s attempted staff action %s",
            user.user_id,
            user.role.value,
            action,
        )
        raise ForbiddenError("Only scholarship staff may perform this action")


def ensure_owner(user: UserContext, student_id: str, action: str) -> None:
    """Raise ForbiddenError when a non-staff caller acts on another student's data."""
    if user.is_staff:
        return
    if student_id != user.student_identity:
        logger.warning(
            "Ownership denied: user=%s attempted %s on another student's application",
            user.user_id,
            action,
        )
        raise ForbiddenError(f"You can only {action} your own applications")


def resolve_roles(raw_roles: list[str]) -> list[UserRole]:
    """Map token role names onto known roles, preserving order, dropping unknowns."""
    known = {role.value for role in UserRole}
    return [UserRole(r) for r in raw_roles if r in known]
