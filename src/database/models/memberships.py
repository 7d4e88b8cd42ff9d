"""Membership model and the role-based authorization predicate."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .users import UserRole, user_role_column_type


# Roles allowed to invite, edit or remove other users and to change roles
MANAGEMENT_ROLES: frozenset[UserRole] = frozenset({UserRole.OWNER, UserRole.ADMIN})


def can_manage_users(role: UserRole) -> bool:
    """Check if a company-scoped role may manage the company's users."""
    return UserRole(role) in MANAGEMENT_ROLES


class Membership(Base):
    __tablename__ = "memberships"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[UserRole] = mapped_column(
        user_role_column_type, default=UserRole.PICKER, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id], back_populates="memberships")
    company = relationship("Company", back_populates="memberships")

    __table_args__ = (
        # Enforce a single membership per user per company
        UniqueConstraint("user_id", "company_id", name="uq_memberships_user_company"),
    )
