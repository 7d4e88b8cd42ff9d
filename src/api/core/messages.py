"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    MEMBERSHIP_NOT_FOUND = "MEMBERSHIP_NOT_FOUND"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # User management
    USER_CREATED = "USER_CREATED"
    USER_ADDED_TO_COMPANY = "USER_ADDED_TO_COMPANY"
    USER_UPDATED = "USER_UPDATED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ALREADY_MEMBER = "USER_ALREADY_MEMBER"
    USER_UPDATE_FAILED = "USER_UPDATE_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"


    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFLICT = "CONFLICT"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Missing authorization token",
    MessageCode.INVALID_TOKEN: "Invalid or expired token",
    MessageCode.MEMBERSHIP_NOT_FOUND: "Membership not found",
    MessageCode.INSUFFICIENT_PERMISSIONS: "Insufficient permissions",
    # User management
    MessageCode.USER_CREATED: "User created successfully",
    MessageCode.USER_ADDED_TO_COMPANY: "Existing user added to company",
    MessageCode.USER_UPDATED: "User updated successfully",
    MessageCode.USER_NOT_FOUND: "User not found in this company",
    MessageCode.USER_ALREADY_MEMBER: "User already belongs to this company",
    MessageCode.USER_UPDATE_FAILED: "Failed to update user",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Invalid payload",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.DATABASE_ERROR: "Database error occurred",
    MessageCode.CONFLICT: "Data integrity constraint violated",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
    MessageCode.METHOD_NOT_ALLOWED: "Method not allowed",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
