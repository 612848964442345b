"""Tests for the error taxonomy and its response bodies."""

import logging

import pytest

from local_supermemory.core.base import ErrorCode, ErrorLevel
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.error_context import ErrorContext
from local_supermemory.core.errors import StorageError, ValidationError


@pytest.mark.parametrize(
    ("level", "expected"),
    [(ErrorLevel.WARNING, logging.WARNING), (ErrorLevel.ERROR, logging.ERROR), (ErrorLevel.DEBUG, logging.DEBUG)],
)
def test_logging_levels(level, expected):
    assert level.to_logging_level() == expected


def test_dict_details_get_defaults():
    error = StorageError("disk full", details={"operation": "insert", "container_tag": "work"})
    assert error.details.source == "unknown"
    assert error.details.operation == "insert"
    assert error.details.container_tag == "work"
    assert error.code is ErrorCode.STORAGE_FAILURE
    assert error.status_code == 500


def test_log_fields_and_body_share_trace_id():
    error = ValidationError("Content is required", details={"source": "memory_service", "operation": "create"})
    ctx = ErrorContext(error, path="/api/v1/add")

    fields = ctx.log_fields()
    body = ctx.response_body(error.message, error.code)

    assert body == {"error": "Content is required", "error_code": "invalid_input", "trace_id": ctx.trace_id}
    assert fields["trace_id"] == ctx.trace_id
    assert fields["path"] == "/api/v1/add"
    assert fields["error_code"] == "invalid_input"
    assert fields["details"] == {"source": "memory_service", "operation": "create"}


def test_plain_exceptions_have_no_code():
    fields = ErrorContext(RuntimeError("boom")).log_fields()
    assert fields["error_type"] == "RuntimeError"
    assert "error_code" not in fields


def test_with_error_handling_reraises():
    @with_error_handling()
    def fail():
        raise StorageError("locked")

    with pytest.raises(StorageError):
        fail()


@pytest.mark.asyncio
async def test_with_error_handling_can_swallow():
    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False)
    async def fail():
        raise RuntimeError("boom")

    assert await fail() is None
