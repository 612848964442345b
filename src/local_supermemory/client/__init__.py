"""Agent-side access to the memory store, over HTTP or in-process."""

from .base import (
    BaseMemoryClient,
    ForgetOutcome,
    MemoryClient,
    ProfileMatch,
    ProfileResult,
    SearchHit,
    StoredMemory,
)
from .config import DEFAULT_BASE_URL, ClientConfig
from .embedded import EmbeddedMemoryClient
from .factory import create_client
from .http_client import HttpMemoryClient
from .validation import container_tag_problem, default_container_tag, sanitize_content

__all__ = [
    "DEFAULT_BASE_URL",
    "BaseMemoryClient",
    "ClientConfig",
    "EmbeddedMemoryClient",
    "ForgetOutcome",
    "HttpMemoryClient",
    "MemoryClient",
    "ProfileMatch",
    "ProfileResult",
    "SearchHit",
    "StoredMemory",
    "container_tag_problem",
    "create_client",
    "default_container_tag",
    "sanitize_content",
]
