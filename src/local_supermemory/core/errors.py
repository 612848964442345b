"""Specific error types for the local memory store."""

from .base import (
    ApplicationError,
    DatabaseErrorDetails,
    ErrorCode,
    ErrorLevel,
    ValidationErrorDetails,
)


class ValidationError(ApplicationError):
    """A required field is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, details: ValidationErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            level=ErrorLevel.WARNING,
            details=details,
        )


class StorageError(ApplicationError):
    """The persistence layer failed; the request fails without retry."""

    status_code = 500

    def __init__(self, message: str, details: DatabaseErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_FAILURE,
            level=ErrorLevel.ERROR,
            details=details,
        )
