"""User directory router for company-scoped user endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from src.api.core.dependencies import (
    CurrentUserAuthDep,
    RefreshTokenViewerDep,
    UserDirectoryServiceDep,
    UserInviterDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.api.user.models import RefreshTokenModel, UserModel
from src.api.user.requests import (
    RefreshTokenListResponse,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    current_user: CurrentUserAuthDep,
    directory_service: UserDirectoryServiceDep,
) -> UserListResponse:
    """List every user of the caller's company."""
    rows = await directory_service.list_company_users(current_user.company_id)
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[UserModel.from_row(row) for row in rows],
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def invite_user(
    invite: UserCreateRequest,
    current_user: UserInviterDep,
    directory_service: UserDirectoryServiceDep,
) -> UserResponse:
    """Invite a user into the caller's company, creating the user if needed."""
    user, membership, created = await directory_service.invite_user(
        company_id=current_user.company_id,
        email=invite.email,
        password=invite.password,
        first_name=invite.first_name,
        last_name=invite.last_name,
        phone=invite.phone,
        role=invite.role,
    )
    return APIResponse.success(
        message_code=(
            MessageCode.USER_CREATED if created else MessageCode.USER_ADDED_TO_COMPANY
        ),
        data=UserModel.from_membership(user, membership),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: CurrentUserAuthDep,
    directory_service: UserDirectoryServiceDep,
) -> UserResponse:
    """Get one user of the caller's company."""
    user, membership = await directory_service.get_company_user(
        user_id, current_user.company_id
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=UserModel.from_membership(user, membership),
    )


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    changes: UserUpdateRequest,
    current_user: CurrentUserAuthDep,
    directory_service: UserDirectoryServiceDep,
) -> UserResponse:
    """Update a user's profile and, for managers, their role."""
    user, membership = await directory_service.update_user(
        current_user, user_id, changes.to_changes()
    )
    return APIResponse.success(
        message_code=MessageCode.USER_UPDATED,
        data=UserModel.from_membership(user, membership),
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_user(
    user_id: UUID,
    current_user: CurrentUserAuthDep,
    directory_service: UserDirectoryServiceDep,
) -> Response:
    """Remove a user from the caller's company."""
    await directory_service.remove_user(current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/refresh-tokens", response_model=RefreshTokenListResponse)
async def list_refresh_tokens(
    user_id: UUID,
    current_user: RefreshTokenViewerDep,
    directory_service: UserDirectoryServiceDep,
) -> RefreshTokenListResponse:
    """List a company member's refresh tokens."""
    rows = await directory_service.list_refresh_tokens(
        current_user.company_id, user_id
    )
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RefreshTokenModel.from_row(row) for row in rows],
    )
