# This project was developed with assistance from AI tools.
"""Shared data scope filtering for service queries.

Students see only their own applications (and the rows hanging off them);
staff see everything. The join_to_application parameter handles queries
whose root entity is a child of Application (documents, allocations).
"""

from db import Application

from ..schemas.auth import UserContext


def apply_student_scope(stmt, user: UserContext, *, join_to_application=None):
    """Restrict a query to the caller's own applications unless they are staff.

    Args:
        stmt: A SQLAlchemy select statement.
        user: The caller's UserContext.
        join_to_application: ORM relationship attribute to join to reach
            Application (e.g., ``Allocation.application``). Pass ``None``
            when querying Application directly.

    Returns:
        The filtered statement.
    """
    if user.is_staff:
        return stmt
    if join_to_application is not None:
        stmt = stmt.join(join_to_application)
    return stmt.where(Application.student_id == user.student_identity)
