"""Test factories for User Directory API models."""

from .base import AsyncSQLAlchemyModelFactory
from .companies import CompanyFactory
from .memberships import MembershipFactory
from .refresh_tokens import RefreshTokenFactory
from .users import TEST_PASSWORD, UserFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "CompanyFactory",
    "MembershipFactory",
    "RefreshTokenFactory",
    "TEST_PASSWORD",
    "UserFactory",
]
