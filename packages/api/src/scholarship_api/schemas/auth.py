# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    roles: frozenset[UserRole] = frozenset()
    email: str = ""
    name: str = ""
    student_id: str | None = None

    @property
    def is_staff(self) -> bool:
        return bool(({self.role} | self.roles) & UserRole.staff_roles())

    @property
    def student_identity(self) -> str:
        """Identity matched against Application.student_id."""
        return self.student_id or self.user_id


class TokenPayload(BaseModel):
    """Decoded JWT token claims from Keycloak."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    student_id: str | None = None
    realm_access: dict = Field(default_factory=dict)
