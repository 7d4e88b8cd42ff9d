"""Database models for the User Directory API."""

from .base import Base
from .companies import Company
from .memberships import MANAGEMENT_ROLES, Membership, can_manage_users
from .refresh_tokens import AuthContext, RefreshToken
from .users import User, UserRole

# Export all models and enums
__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "AuthContext",
    # Authorization
    "MANAGEMENT_ROLES",
    "can_manage_users",
    # Models
    "Company",
    "User",
    "Membership",
    "RefreshToken",
]
