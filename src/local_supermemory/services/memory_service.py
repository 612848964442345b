"""Memory ingestion and listing.

Creating a memory also derives profile facts from its content. The memory row
and its fact rows are written in one transaction, so a failure leaves neither
behind.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from local_supermemory.core.base import ErrorLevel, ValidationErrorDetails
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.errors import ValidationError
from local_supermemory.core.logging import get_logger
from local_supermemory.domain.models import Memory, MemoryPage
from local_supermemory.domain.text import FactExtractor
from local_supermemory.infrastructure.repositories import MemoryRepository, ProfileRepository
from local_supermemory.infrastructure.sqlite import transaction

if TYPE_CHECKING:
    import sqlite3

    from structlog.typing import FilteringBoundLogger

DEFAULT_CONTAINER_TAG = "default"


def require_container_tag(container_tag: str | None, operation: str) -> str:
    """Container tags partition every record and may not be blank."""
    if not container_tag or not container_tag.strip():
        raise ValidationError(
            message="containerTag must be a non-empty string",
            details=ValidationErrorDetails(
                source="memory_service",
                operation=operation,
                field="containerTag",
                actual_value=container_tag,
            ),
        )
    return container_tag


class MemoryService:
    """Creates memories (with their derived facts) and lists active ones."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        extractor: FactExtractor | None = None,
        logger: FilteringBoundLogger | None = None,
    ):
        self.connection = connection
        self.extractor = extractor or FactExtractor()
        self.logger = logger or get_logger(__name__)

        self.memory_repo = MemoryRepository(connection, logger=self.logger)
        self.profile_repo = ProfileRepository(connection, logger=self.logger)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def create(
        self,
        container_tag: str,
        content: str,
        metadata: dict[str, Any] | None = None,
        custom_id: str | None = None,
    ) -> Memory:
        """Store a memory and record the facts extracted from it as dynamic.

        Args:
            container_tag: Partition the memory belongs to for its lifetime
            content: The text to remember
            metadata: Opaque key/value data returned verbatim
            custom_id: Caller-supplied identifier, not required to be unique

        Returns:
            The stored memory

        Raises:
            ValidationError: If ``content`` is empty or ``metadata`` is not JSON
        """
        if not content or not content.strip():
            raise ValidationError(
                message="Content is required",
                details=ValidationErrorDetails(
                    source="memory_service",
                    operation="create",
                    field="content",
                    actual_value=content,
                    constraint="non-empty",
                ),
            )
        require_container_tag(container_tag, "create")

        facts = self.extractor.extract(content)

        with transaction(self.connection):
            memory = self.memory_repo.insert(container_tag, content, metadata=metadata, custom_id=custom_id)
            self.profile_repo.record_dynamic_facts(container_tag, facts)

        self.logger.info(
            "Added memory",
            memory_id=memory.id,
            container_tag=container_tag,
            content_length=len(content),
            facts=len(facts),
        )
        return memory

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def list_active(self, container_tags: Sequence[str], limit: int, offset: int = 0) -> MemoryPage:
        """Active memories of the given containers, newest first, plus the total count."""
        if limit < 1 or offset < 0:
            raise ValidationError(
                message="limit must be positive and offset non-negative",
                details=ValidationErrorDetails(
                    source="memory_service",
                    operation="list_active",
                    field="limit" if limit < 1 else "offset",
                    actual_value=limit if limit < 1 else offset,
                ),
            )

        page = self.memory_repo.list_active(container_tags, limit=limit, offset=offset)
        self.logger.debug(
            "Listed memories",
            container_tags=list(container_tags),
            returned=len(page.memories),
            total=page.total,
        )
        return page
