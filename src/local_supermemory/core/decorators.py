"""Error handling decorators"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from .base import ApplicationError, ErrorLevel
from .error_context import ErrorContext
from .logging import get_logger

logger = get_logger(__name__)
P = ParamSpec("P")
T = TypeVar("T")


def _log_failure(func: Callable[..., Any], error: Exception, default_level: ErrorLevel) -> None:
    level = error.level if isinstance(error, ApplicationError) else default_level
    ctx = ErrorContext(error, function=func.__qualname__)
    logger.log(
        level.to_logging_level(),
        f"Error in {func.__name__}: {error!s}",
        exc_info=level in (ErrorLevel.ERROR, ErrorLevel.CRITICAL),
        **ctx.log_fields(),
    )


def with_error_handling(
    error_level: ErrorLevel = ErrorLevel.ERROR,
    reraise: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for logging errors raised by service and repository methods.

    ``ApplicationError`` subclasses are logged at their own level, anything
    else at ``error_level``.

    Args:
        error_level: Severity level for unexpected errors
        reraise: Whether to re-raise the error after logging it

    Returns:
        Decorated function with error handling
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                try:
                    return await cast("Callable[P, Awaitable[T]]", func)(*args, **kwargs)
                except Exception as e:
                    _log_failure(func, e, error_level)
                    if reraise:
                        raise
                    return cast("T", None)

            return cast("Callable[P, T]", async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log_failure(func, e, error_level)
                if reraise:
                    raise
                return cast("T", None)

        return sync_wrapper

    return decorator
