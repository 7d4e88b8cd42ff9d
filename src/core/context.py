"""Authentication context model for typed caller identity."""

from dataclasses import dataclass
from uuid import UUID

from src.database.models import AuthContext, UserRole


@dataclass(frozen=True)
class AuthenticatedUserContext:
    """Caller identity resolved from the access token and the caller's membership.

    ``role`` is the caller's role inside ``company_id``, never the global user role.
    """

    user_id: UUID
    company_id: UUID
    role: UserRole
    email: str
    context: AuthContext = AuthContext.WEB

    def __post_init__(self):
        """Ensure all required fields are present and valid."""
        if not self.user_id:
            raise ValueError("User is required in authentication context")
        if not self.company_id:
            raise ValueError("Company is required in authentication context")

    def is_self(self, user_id: UUID) -> bool:
        return self.user_id == user_id
