"""Request-scoped logging context.

Values bound here are merged into every log event emitted while the current
request is being handled (see ``structlog.contextvars.merge_contextvars``).
"""

from typing import Any

import structlog


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return dict(structlog.contextvars.get_contextvars())


def bind_log_context(**values: Any) -> None:
    """Bind values to the logging context of the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_log_context() -> None:
    """Clear the current logging context."""
    structlog.contextvars.clear_contextvars()
