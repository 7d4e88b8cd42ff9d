"""User domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.database.models import AuthContext, Membership, User, UserRole
from src.database.procedures import RefreshTokenRow, UserMembershipRow


class UserModel(BaseModel):
    """A user as seen from one company: profile fields plus the membership role."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    role: UserRole
    company_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_membership(cls, user: User, membership: Membership) -> "UserModel":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            role=membership.role,
            company_id=membership.company_id,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @classmethod
    def from_row(cls, row: UserMembershipRow) -> "UserModel":
        return cls(
            id=row.user_id,
            email=row.user_email,
            first_name=row.user_first_name,
            last_name=row.user_last_name,
            phone=row.user_phone,
            role=row.membership_role,
            company_id=row.company_id,
            created_at=row.user_created_at,
            updated_at=row.user_updated_at,
        )


class RefreshTokenModel(BaseModel):
    """Refresh token metadata. The token value itself is never exposed."""

    id: UUID
    token_id: str
    expires_at: datetime
    revoked: bool
    created_at: datetime
    context: AuthContext

    @classmethod
    def from_row(cls, row: RefreshTokenRow) -> "RefreshTokenModel":
        return cls(
            id=row.refresh_token_id,
            token_id=row.token_identifier,
            expires_at=row.expires_at,
            revoked=row.is_revoked,
            created_at=row.created_at,
            context=row.token_context,
        )
