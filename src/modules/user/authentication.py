"""Bearer token authentication against company memberships."""

from fastapi import status
from jose import JWTError, jwt
from sqlalchemy import select

from src.api.core.constants import JWT_ALGORITHM
from src.api.core.exceptions.base import DirectoryException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AuthenticatedUserContext
from src.database.models import Membership, User
from src.modules.user.jwt_claims import extract_access_claims
from src.utils.settings.auth import AuthSettings


class AuthenticationService(BaseService):
    """Resolves an access token into the caller's company-scoped identity."""

    async def authenticate(self, token: str) -> AuthenticatedUserContext:
        try:
            payload = jwt.decode(
                token,
                AuthSettings().JWT_ACCESS_SECRET,
                algorithms=[JWT_ALGORITHM],
            )
        except JWTError as e:
            self.logger.info(f"JWT decoding failed: {e}")
            raise DirectoryException(
                MessageCode.INVALID_TOKEN,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Invalid or expired authentication token"},
            )

        try:
            claims = extract_access_claims(payload)
        except ValueError as e:
            self.logger.info(f"Rejected access token payload: {e}")
            raise DirectoryException(
                MessageCode.INVALID_TOKEN,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Invalid token payload"},
            )

        stmt = (
            select(Membership, User.email)
            .join(User, User.id == Membership.user_id)
            .where(
                Membership.user_id == claims.user_id,
                Membership.company_id == claims.company_id,
            )
        )
        result = await self.db.execute(stmt)
        row = result.one_or_none()

        if row is None:
            raise DirectoryException(
                MessageCode.MEMBERSHIP_NOT_FOUND,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Caller is not a member of the token's company"},
            )

        membership, email = row
        return AuthenticatedUserContext(
            user_id=membership.user_id,
            company_id=membership.company_id,
            role=membership.role,
            email=email,
            context=claims.context,
        )
