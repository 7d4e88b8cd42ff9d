from typing import Annotated, AsyncGenerator

import structlog
from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.constants import BEARER_SCHEME
from src.api.core.exceptions.base import DirectoryException
from src.api.core.messages import MessageCode
from src.core.context import AuthenticatedUserContext
from src.database.models import can_manage_users
from src.modules.health.service import HealthService
from src.modules.user.authentication import AuthenticationService
from src.modules.user.directory import UserDirectoryService
from src.utils.logger import get_logger

logger = get_logger(__name__)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_user_directory_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserDirectoryService:
    """Get user directory service with database session."""
    return UserDirectoryService(db)


async def get_health_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> HealthService:
    """Get health service with database session."""
    return HealthService(db)


def _extract_bearer_token(request: Request) -> str:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        raise DirectoryException(
            MessageCode.AUTH_REQUIRED,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Provide an 'Authorization: Bearer <token>' header"},
        )

    auth_parts = authorization.split(" ")
    if len(auth_parts) != 2 or auth_parts[0].lower() != BEARER_SCHEME:
        raise DirectoryException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Authorization header must be 'Bearer <token>'"},
        )
    return auth_parts[1]


async def get_current_user_authenticated(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> AuthenticatedUserContext:
    """Dependency resolving the caller from the bearer token and their membership.

    The resolved context is also stored on ``request.state.auth`` and bound to
    the structlog context so every later log line carries the caller.
    """
    token = _extract_bearer_token(request)
    current_user = await AuthenticationService(db).authenticate(token)

    structlog.contextvars.bind_contextvars(
        user_id=str(current_user.user_id),
        company_id=str(current_user.company_id),
    )
    request.state.auth = current_user
    return current_user


UserDirectoryServiceDep = Annotated[
    UserDirectoryService, Depends(get_user_directory_service)
]
HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]

CurrentUserAuthDep = Annotated[
    AuthenticatedUserContext, Depends(get_current_user_authenticated)
]


def require_user_manager(action: str):
    """Build a dependency that only lets management-capable callers through.

    Dependencies resolve before the request body is parsed, so a caller
    without a management role gets 403 whatever payload they send.

    Args:
        action: Short description of the guarded action, used in the error details
    """

    async def check_user_manager(
        current_user: CurrentUserAuthDep,
    ) -> AuthenticatedUserContext:
        if not can_manage_users(current_user.role):
            logger.info(
                "Rejected action for non-management role",
                action=action,
                role=current_user.role.value,
            )
            raise DirectoryException(
                MessageCode.INSUFFICIENT_PERMISSIONS,
                status.HTTP_403_FORBIDDEN,
                {"description": f"Insufficient permissions to {action}"},
            )
        return current_user

    return check_user_manager


UserInviterDep = Annotated[
    AuthenticatedUserContext, Depends(require_user_manager("invite users"))
]
RefreshTokenViewerDep = Annotated[
    AuthenticatedUserContext, Depends(require_user_manager("view refresh tokens"))
]
