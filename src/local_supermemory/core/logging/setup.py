"""Centralized logging setup with Logfire integration.

structlog is the logging front end for every component; Logfire receives the
same events through its structlog processor and only ships them off-box when
a token is configured.
"""

import logging
import sys
from typing import TYPE_CHECKING

import logfire
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.types import EventDict, Processor, WrappedLogger
from structlog.typing import FilteringBoundLogger

if TYPE_CHECKING:
    from local_supermemory.core.config import Settings


def add_error_type(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Record the exception class name next to an ``error`` field."""
    if "error" in event_dict and isinstance(event_dict["error"], BaseException):
        event_dict["error_type"] = type(event_dict["error"]).__name__

    return event_dict


def setup_logging(settings: "Settings") -> None:
    """Configure structlog, stdlib logging and Logfire for one application.

    Args:
        settings: Process settings carrying the log level, debug flag and
            optional Logfire token.
    """
    logfire.configure(
        service_name=settings.service_name,
        token=settings.logfire_token,
        send_to_logfire="if-token-present",
        console=False,
    )

    level = logging.DEBUG if settings.debug else logging.getLevelNamesMapping().get(
        settings.log_level.upper(), logging.INFO
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        CallsiteParameterAdder(
            parameters=[
                CallsiteParameter.FILENAME,
                CallsiteParameter.LINENO,
                CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_error_type,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        # Must come before the final renderer
        logfire.StructlogProcessor(),
        structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Route stdlib loggers (uvicorn, httpx) through the same processors
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        foreign_pre_chain=processors[:-2],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def get_logger(name: str | None = None, **initial_values: object) -> FilteringBoundLogger:
    """Get a structured logger instance.

    Args:
        name: The name of the logger (usually the component name)
        **initial_values: Key/value pairs bound to every event of this logger

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name, **initial_values)
