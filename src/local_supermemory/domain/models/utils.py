"""Utility functions for domain models."""

from datetime import UTC, datetime
from uuid import uuid4


def utc_now() -> datetime:
    """Get the current UTC datetime with timezone awareness."""
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """Current UTC time as a fixed-width ISO-8601 string.

    Fixed width keeps lexical order equal to chronological order in sqlite.
    """
    return utc_now().isoformat(timespec="microseconds")


def new_id() -> str:
    """Opaque identifier for a new record."""
    return str(uuid4())
