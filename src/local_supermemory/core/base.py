"""Error taxonomy of the memory store.

Every failure a caller can see is an ``ApplicationError``: it knows the HTTP
status it maps to, the code placed in the response body and the level it is
logged at. "Nothing matched" is not an error; operations report it through
their return value.
"""

import logging
from enum import Enum
from typing import Any

from logfire.integrations.pydantic import PluginSettings
from pydantic import BaseModel, Field


class ErrorLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        return logging.getLevelNamesMapping()[self.name]


class ErrorCode(str, Enum):
    """Machine-readable ``error_code`` of an error response."""

    # Caller mistakes
    INVALID_REQUEST = "invalid_request"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Store failures
    STORAGE_FAILURE = "storage_failure"
    STORE_UNAVAILABLE = "store_unavailable"


class ErrorDetails(BaseModel, plugin_settings=PluginSettings(logfire={"record": "all"})):
    """Where a failure happened; logged next to the error, never returned to callers."""

    source: str = Field(description="Component that raised the error")
    operation: str = Field(description="Operation that was running")
    container_tag: str | None = Field(None, description="Container the operation was scoped to")


class ValidationErrorDetails(ErrorDetails):
    field: str | None = Field(None, description="Request field that was rejected")
    actual_value: Any = Field(None, description="Value that was rejected")
    constraint: str | None = Field(None, description="Rule the value broke")


class DatabaseErrorDetails(ErrorDetails):
    table: str | None = Field(None, description="memories or profile_facts")
    query_type: str | None = Field(None, description="select, insert, update or delete")
    database_path: str | None = Field(None, description="Location of the sqlite file")


class ApplicationError(Exception):
    """Base class of every error surfaced to API callers."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: ErrorDetails | dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.level = level

        if isinstance(details, dict):
            details = ErrorDetails.model_validate({"source": "unknown", "operation": "unknown", **details})
        self.details = details or ErrorDetails(source="unknown", operation="unknown")

        super().__init__(message)
