"""Forgetting, bulk cleanup, fact promotion and store-wide statistics.

Deleting or forgetting a memory never touches the facts derived from it;
facts outlive their source until the whole container is wiped.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel

from local_supermemory.core.base import ErrorLevel, ValidationErrorDetails
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.errors import ValidationError
from local_supermemory.core.logging import get_logger
from local_supermemory.domain.models import StoreStats
from local_supermemory.infrastructure.repositories import MemoryRepository, ProfileRepository
from local_supermemory.infrastructure.sqlite import transaction
from local_supermemory.services.memory_service import require_container_tag

if TYPE_CHECKING:
    import sqlite3

    from structlog.typing import FilteringBoundLogger


class ForgetResult(BaseModel):
    """Outcome of a soft delete; ``affected == 0`` means nothing matched."""

    affected: int

    @property
    def forgotten(self) -> bool:
        return self.affected > 0


class WipeResult(BaseModel):
    """Rows removed by a container wipe."""

    memories: int
    facts: int


class MaintenanceService:
    """Orchestrates cleanup and aggregate operations over both stores."""

    def __init__(self, connection: sqlite3.Connection, logger: FilteringBoundLogger | None = None):
        self.connection = connection
        self.logger = logger or get_logger(__name__)

        self.memory_repo = MemoryRepository(connection, logger=self.logger)
        self.profile_repo = ProfileRepository(connection, logger=self.logger)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def forget(
        self,
        container_tag: str,
        memory_id: str | None = None,
        content: str | None = None,
    ) -> ForgetResult:
        """Soft-delete by id (at most one row) or by exact content (every match).

        Raises:
            ValidationError: Unless exactly one of ``memory_id`` / ``content`` is given
        """
        if bool(memory_id) == bool(content):
            raise ValidationError(
                message="Either id or content is required" if not memory_id else "Provide only one of id or content",
                details=ValidationErrorDetails(
                    source="maintenance_service",
                    operation="forget",
                    field="id" if not memory_id else "content",
                    constraint="exactly one of id, content",
                ),
            )
        require_container_tag(container_tag, "forget")

        with transaction(self.connection):
            if memory_id:
                affected = self.memory_repo.soft_delete_by_id(container_tag, memory_id)
            else:
                affected = self.memory_repo.soft_delete_by_content(container_tag, content or "")

        self.logger.info(
            "Forgot memories",
            container_tag=container_tag,
            by="id" if memory_id else "content",
            affected=affected,
        )
        return ForgetResult(affected=affected)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def bulk_delete(self, memory_ids: Sequence[str]) -> int:
        """Hard-delete memories by id, whatever their container or state.

        Raises:
            ValidationError: If ``memory_ids`` is empty
        """
        if not memory_ids:
            raise ValidationError(
                message="ids array is required",
                details=ValidationErrorDetails(
                    source="maintenance_service",
                    operation="bulk_delete",
                    field="ids",
                    constraint="non-empty array",
                ),
            )

        with transaction(self.connection):
            deleted = self.memory_repo.hard_delete(memory_ids)

        self.logger.info("Bulk deleted memories", requested=len(memory_ids), deleted=deleted)
        return deleted

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def promote_fact(self, container_tag: str, fact: str) -> bool:
        """Reclassify a fact from dynamic to static; False when nothing matched."""
        if not fact:
            raise ValidationError(
                message="fact is required",
                details=ValidationErrorDetails(source="maintenance_service", operation="promote_fact", field="fact"),
            )
        require_container_tag(container_tag, "promote_fact")

        with transaction(self.connection):
            promoted = self.profile_repo.promote(container_tag, fact)

        self.logger.info("Promoted fact", container_tag=container_tag, promoted=promoted)
        return promoted

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def stats(self) -> StoreStats:
        """Counts across every container.

        Fact rows are counted regardless of whether their source memory has
        been forgotten or deleted.
        """
        return StoreStats(
            active_memory_count=self.memory_repo.count_active(),
            total_fact_count=self.profile_repo.count(),
            container_tags=self.memory_repo.container_tags(),
        )

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def wipe_container(self, container_tag: str) -> WipeResult:
        """Irreversibly remove every memory and fact of a container."""
        require_container_tag(container_tag, "wipe_container")

        with transaction(self.connection):
            memories = self.memory_repo.wipe(container_tag)
            facts = self.profile_repo.wipe(container_tag)

        self.logger.warning("Wiped container", container_tag=container_tag, memories=memories, facts=facts)
        return WipeResult(memories=memories, facts=facts)
