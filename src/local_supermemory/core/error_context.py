"""Ties the log line of a failure to the error body a caller receives.

Both carry the same trace id, so a ``trace_id`` reported by an agent can be
found in the server log.
"""

from typing import Any
from uuid import uuid4

from .base import ApplicationError, ErrorCode


class ErrorContext:
    """One failure, its trace id and where it happened (request path, function)."""

    def __init__(self, error: Exception, **context: Any):
        self.error = error
        self.trace_id = str(uuid4())
        self.context = context

    def log_fields(self) -> dict[str, Any]:
        """Structured fields for the log event describing this failure."""
        fields: dict[str, Any] = {
            "trace_id": self.trace_id,
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            **self.context,
        }
        if isinstance(self.error, ApplicationError):
            fields["error_code"] = self.error.code.value
            fields["details"] = self.error.details.model_dump(exclude_none=True)
        return fields

    def response_body(self, message: str, code: ErrorCode) -> dict[str, Any]:
        """JSON body of the error response; ``error`` is meant for humans."""
        return {"error": message, "error_code": code.value, "trace_id": self.trace_id}
