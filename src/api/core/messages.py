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

    # Prediction history
    PREDICTIONS_RETRIEVED = "PREDICTIONS_RETRIEVED"
    PREDICTION_RETRIEVED = "PREDICTION_RETRIEVED"
    PREDICTION_NOT_FOUND = "PREDICTION_NOT_FOUND"
    PREDICTION_FORBIDDEN = "PREDICTION_FORBIDDEN"
    FAVORITE_ADDED = "FAVORITE_ADDED"
    FAVORITE_REMOVED = "FAVORITE_REMOVED"
    NOTES_UPDATED = "NOTES_UPDATED"
    PREDICTION_DELETED = "PREDICTION_DELETED"
    STATISTICS_RETRIEVED = "STATISTICS_RETRIEVED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    # Prediction history
    MessageCode.PREDICTIONS_RETRIEVED: "Predictions retrieved successfully",
    MessageCode.PREDICTION_RETRIEVED: "Prediction retrieved successfully",
    MessageCode.PREDICTION_NOT_FOUND: "Prediction not found",
    MessageCode.PREDICTION_FORBIDDEN: "You do not have permission to access this prediction",
    MessageCode.FAVORITE_ADDED: "Prediction added to favorites",
    MessageCode.FAVORITE_REMOVED: "Prediction removed from favorites",
    MessageCode.NOTES_UPDATED: "Notes updated successfully",
    MessageCode.PREDICTION_DELETED: "Prediction deleted successfully",
    MessageCode.STATISTICS_RETRIEVED: "Statistics retrieved successfully",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
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

    @classmethod
    def error(
        cls,
        message_code: MessageCode,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Error occurred"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
