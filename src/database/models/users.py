"""User model and the role vocabulary."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, Enum as SQLAlchemyEnum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class UserRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    PICKER = "PICKER"


# Roles are persisted by name in a VARCHAR column on every backend
user_role_column_type = SQLAlchemyEnum(
    UserRole, name="user_role", native_enum=False, length=16
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
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
    # Back-reference to the membership the user was first invited through
    default_membership_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("memberships.id", ondelete="SET NULL", use_alter=True),
        unique=True,
        nullable=True,
    )

    # Relationships (defined via string references to avoid circular imports)
    memberships = relationship(
        "Membership",
        foreign_keys="Membership.user_id",
        back_populates="user",
    )
    refresh_tokens = relationship("RefreshToken", back_populates="user")
