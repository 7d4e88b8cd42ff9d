from pydantic import BaseModel, EmailStr, Field, field_validator

from src.api.core.messages import APIResponse
from src.api.user.models import RefreshTokenModel, UserModel
from src.database.models import UserRole


class UserCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: str | None = Field(None, min_length=7)
    role: UserRole = UserRole.PICKER

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserUpdateRequest(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)
    # An explicit null clears the stored phone
    phone: str | None = None
    password: str | None = Field(None, min_length=8)
    role: UserRole | None = None

    @field_validator("first_name", "last_name", "password", "role")
    @classmethod
    def reject_null(cls, value):
        # Omitted fields keep their default and never reach this validator
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def to_changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


UserResponse = APIResponse[UserModel]
UserListResponse = APIResponse[list[UserModel]]
RefreshTokenListResponse = APIResponse[list[RefreshTokenModel]]
