"""Exception handlers mapping errors to JSON responses"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .base import ApplicationError, ErrorCode, ErrorLevel
from .error_context import ErrorContext
from .logging import get_logger

logger = get_logger(__name__)

_HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.STORE_UNAVAILABLE,
}


def _validation_message(error: RequestValidationError) -> str:
    """Turn the first pydantic error into a readable sentence."""
    errors = error.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    raised = (first.get("ctx") or {}).get("error")
    if isinstance(raised, ValueError):
        return str(raised)

    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def handle_application_error(request: Request, error: ApplicationError) -> JSONResponse:
    """Map ``ApplicationError`` subclasses to their status code."""
    ctx = ErrorContext(error, path=request.url.path)
    logger.log(error.level.to_logging_level(), "Request failed", **ctx.log_fields())
    return JSONResponse(
        status_code=error.status_code,
        content=ctx.response_body(error.message, error.code),
    )


async def handle_request_validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422."""
    ctx = ErrorContext(error, path=request.url.path)
    message = _validation_message(error)
    logger.warning("Rejected request", reason=message, **ctx.log_fields())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ctx.response_body(message, ErrorCode.INVALID_REQUEST),
    )


async def handle_http_exception(request: Request, error: HTTPException) -> JSONResponse:
    """Keep the error body shape consistent for framework-raised HTTP errors."""
    level = (
        ErrorLevel.ERROR
        if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        else ErrorLevel.WARNING
    )
    ctx = ErrorContext(error, path=request.url.path)
    logger.log(level.to_logging_level(), "HTTP error", status_code=error.status_code, **ctx.log_fields())
    return JSONResponse(
        status_code=error.status_code,
        content=ctx.response_body(
            str(error.detail), _HTTP_ERROR_CODES.get(error.status_code, ErrorCode.INVALID_REQUEST)
        ),
        headers=getattr(error, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(ApplicationError, handle_application_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
