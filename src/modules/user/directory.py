"""Company-scoped user directory: list, invite, update and remove users."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from starlette.concurrency import run_in_threadpool

from src.api.core.exceptions.base import DirectoryException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AuthenticatedUserContext
from src.database.models import (
    Membership,
    RefreshToken,
    User,
    UserRole,
    can_manage_users,
)
from src.database.procedures import (
    RefreshTokenRow,
    StoredProcedure,
    UserMembershipRow,
    call_procedure,
)
from src.utils.hashing import HashingService

# Updatable user columns that ignore an explicit null
NON_NULLABLE_PROFILE_FIELDS = ("first_name", "last_name")


def _user_not_found(user_id: UUID) -> DirectoryException:
    return DirectoryException(
        MessageCode.USER_NOT_FOUND,
        status.HTTP_404_NOT_FOUND,
        {"user_id": str(user_id)},
    )


def _insufficient_permissions(action: str) -> DirectoryException:
    return DirectoryException(
        MessageCode.INSUFFICIENT_PERMISSIONS,
        status.HTTP_403_FORBIDDEN,
        {"description": f"Insufficient permissions to {action}"},
    )


class UserDirectoryService(BaseService):
    """Service for the users of a single company.

    Every lookup is scoped by company: a user without a membership in the
    caller's company is reported as not found, never as forbidden.
    """

    async def list_company_users(self, company_id: UUID) -> list[UserMembershipRow]:
        """List every member of a company, ordered by last then first name."""
        rows = await call_procedure(
            self.db, StoredProcedure.USER_MEMBERSHIPS, UserMembershipRow, company_id
        )
        self.logger.debug(
            "Listed company users", company_id=str(company_id), count=len(rows)
        )
        return rows

    async def find_membership(
        self, user_id: UUID, company_id: UUID
    ) -> Membership | None:
        """Get a user's membership in a company, if any."""
        stmt = select(Membership).where(
            Membership.user_id == user_id, Membership.company_id == company_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _is_member_by_email(self, email: str, company_id: UUID) -> bool:
        stmt = (
            select(Membership.id)
            .join(User, User.id == Membership.user_id)
            .where(User.email == email, Membership.company_id == company_id)
        )
        return await self.db.scalar(stmt) is not None

    async def _get_member(
        self, user_id: UUID, company_id: UUID, lock: bool = False
    ) -> tuple[Membership, User] | None:
        stmt = (
            select(Membership, User)
            .join(User, User.id == Membership.user_id)
            .where(Membership.user_id == user_id, Membership.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            # Locks both the membership and the user row until commit
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        membership, user = row
        return membership, user

    async def get_company_user(
        self, user_id: UUID, company_id: UUID
    ) -> tuple[User, Membership]:
        """Get a user as seen from one company.

        Raises:
            DirectoryException: 404 when the user has no membership in the company
        """
        member = await self._get_member(user_id, company_id)
        if member is None:
            raise _user_not_found(user_id)
        membership, user = member
        return user, membership

    async def invite_user(
        self,
        company_id: UUID,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
        role: UserRole = UserRole.PICKER,
    ) -> tuple[User, Membership, bool]:
        """Add a user to a company, creating the user when the email is new.

        An existing user keeps their profile and password; only a membership
        with ``role`` is added. A new user gets that membership as their
        default membership.

        Returns:
            Tuple of (user, membership, created) where ``created`` tells whether
            a new user record was made
        """
        email = email.strip().lower()

        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        try:
            if user is not None:
                if await self.find_membership(user.id, company_id) is not None:
                    raise DirectoryException(
                        MessageCode.USER_ALREADY_MEMBER,
                        status.HTTP_409_CONFLICT,
                        {"email": email},
                    )

                membership = Membership(user_id=user.id, company_id=company_id, role=role)
                self.db.add(membership)
                await self.db.commit()

                self.logger.info(
                    "Added existing user to company",
                    user_id=str(user.id),
                    company_id=str(company_id),
                    role=role.value,
                )
                return user, membership, False

            password_hash = await run_in_threadpool(
                HashingService.hash_password, password
            )
            user = User(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                role=role,
            )
            self.db.add(user)
            await self.db.flush()

            membership = Membership(user_id=user.id, company_id=company_id, role=role)
            self.db.add(membership)
            await self.db.flush()

            user.default_membership_id = membership.id
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            already_member = await self._is_member_by_email(email, company_id)
            self.logger.warning(
                "Invite hit an integrity error",
                email=email,
                company_id=str(company_id),
                already_member=already_member,
            )
            # Only a concurrent invite into this company is a membership clash
            raise DirectoryException(
                (
                    MessageCode.USER_ALREADY_MEMBER
                    if already_member
                    else MessageCode.CONFLICT
                ),
                status.HTTP_409_CONFLICT,
                {"email": email},
            )

        self.logger.info(
            "Created user",
            user_id=str(user.id),
            company_id=str(company_id),
            role=role.value,
        )
        return user, membership, True

    async def update_user(
        self,
        current_user: AuthenticatedUserContext,
        user_id: UUID,
        changes: dict[str, Any],
    ) -> tuple[User, Membership]:
        """Apply a partial update to a user of the caller's company.

        Args:
            current_user: Caller context
            user_id: Target user
            changes: Only the fields the client actually sent

        A role change from a caller who cannot manage users is dropped rather
        than rejected. ``phone`` may be cleared with an explicit null.
        """
        member = await self._get_member(user_id, current_user.company_id, lock=True)
        if member is None:
            raise _user_not_found(user_id)
        membership, user = member

        is_manager = can_manage_users(current_user.role)
        if not current_user.is_self(user_id) and not is_manager:
            raise _insufficient_permissions("update other users")

        user_updates: dict[str, Any] = {}
        for field in NON_NULLABLE_PROFILE_FIELDS:
            if changes.get(field) is not None:
                user_updates[field] = changes[field]
        if "phone" in changes:
            user_updates["phone"] = changes["phone"]
        if changes.get("password"):
            user_updates["password_hash"] = await run_in_threadpool(
                HashingService.hash_password, changes["password"]
            )

        membership_updates: dict[str, Any] = {}
        role = changes.get("role")
        if role is not None:
            if is_manager:
                user_updates["role"] = UserRole(role)
                membership_updates["role"] = UserRole(role)
            else:
                self.logger.info(
                    "Ignoring role change from non-management caller",
                    user_id=str(user_id),
                    requested_role=str(role),
                )

        now = datetime.now(timezone.utc)
        try:
            if user_updates:
                for field, value in user_updates.items():
                    setattr(user, field, value)
                user.updated_at = now
            if membership_updates:
                for field, value in membership_updates.items():
                    setattr(membership, field, value)
                membership.updated_at = now
            await self.db.commit()
        except StaleDataError:
            await self.db.rollback()
            self.logger.error(
                "User disappeared during update",
                user_id=str(user_id),
                company_id=str(current_user.company_id),
            )
            raise DirectoryException(
                MessageCode.USER_UPDATE_FAILED,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"user_id": str(user_id)},
            )

        self.logger.info(
            "Updated user",
            user_id=str(user_id),
            fields=sorted(user_updates),
            role_changed=bool(membership_updates),
        )
        return user, membership

    async def remove_user(
        self, current_user: AuthenticatedUserContext, user_id: UUID
    ) -> bool:
        """Remove a user from the caller's company.

        The user record and their refresh tokens are deleted as well when this
        was their last membership.

        Returns:
            True if the user record itself was deleted
        """
        member = await self._get_member(user_id, current_user.company_id, lock=True)
        if member is None:
            raise _user_not_found(user_id)
        membership, user = member

        if not current_user.is_self(user_id) and not can_manage_users(
            current_user.role
        ):
            raise _insufficient_permissions("remove other users")

        if user.default_membership_id == membership.id:
            user.default_membership_id = None
            await self.db.flush()

        await self.db.execute(delete(Membership).where(Membership.id == membership.id))

        remaining = await self.db.scalar(
            select(func.count())
            .select_from(Membership)
            .where(Membership.user_id == user_id)
        )
        user_deleted = remaining == 0
        if user_deleted:
            await self.db.execute(
                delete(RefreshToken).where(RefreshToken.user_id == user_id)
            )
            await self.db.execute(delete(User).where(User.id == user_id))

        await self.db.commit()

        self.logger.info(
            "Removed user from company",
            user_id=str(user_id),
            company_id=str(current_user.company_id),
            user_deleted=user_deleted,
        )
        return user_deleted

    async def list_refresh_tokens(
        self, company_id: UUID, user_id: UUID
    ) -> list[RefreshTokenRow]:
        """List a company member's refresh tokens, newest first."""
        if await self.find_membership(user_id, company_id) is None:
            raise _user_not_found(user_id)

        return await call_procedure(
            self.db, StoredProcedure.USER_REFRESH_TOKENS, RefreshTokenRow, user_id
        )
