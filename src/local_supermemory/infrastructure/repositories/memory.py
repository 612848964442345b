"""Repository for memory records.

Write methods do not commit; callers group them with
``local_supermemory.infrastructure.sqlite.transaction``.
"""

import json
import sqlite3
from collections.abc import Sequence
from typing import Any

from structlog.typing import FilteringBoundLogger

from local_supermemory.core.base import ErrorLevel, ValidationErrorDetails
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.errors import ValidationError
from local_supermemory.core.logging import get_logger
from local_supermemory.domain.models import Memory, MemoryPage
from local_supermemory.domain.models.utils import new_id, utc_timestamp
from local_supermemory.infrastructure.sqlite import storage_operation
from local_supermemory.infrastructure.sqlite.queries import MemoryQueries


class MemoryRepository:
    """Durable CRUD and soft-delete over ``memories``, partitioned by container tag."""

    def __init__(self, connection: sqlite3.Connection, logger: FilteringBoundLogger | None = None):
        self.connection = connection
        self.logger = logger or get_logger(__name__)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def insert(
        self,
        container_tag: str,
        content: str,
        metadata: dict[str, Any] | None = None,
        custom_id: str | None = None,
    ) -> Memory:
        """Insert a new active memory and return it.

        Raises:
            ValidationError: If ``metadata`` cannot be stored as JSON
        """
        try:
            encoded_metadata = json.dumps(metadata) if metadata is not None else None
        except (TypeError, ValueError) as e:
            raise ValidationError(
                message=f"metadata must be JSON-serialisable: {e}",
                details=ValidationErrorDetails(
                    source="memory_repository",
                    operation="insert",
                    field="metadata",
                    constraint="JSON object",
                ),
            ) from e

        now = utc_timestamp()
        memory = Memory(
            id=new_id(),
            container_tag=container_tag,
            content=content,
            metadata=metadata,
            custom_id=custom_id,
            created_at=now,
            updated_at=now,
        )

        with storage_operation("insert_memory", table="memories"):
            self.connection.execute(
                MemoryQueries.INSERT,
                (
                    memory.id,
                    memory.container_tag,
                    memory.content,
                    encoded_metadata,
                    custom_id,
                    memory.created_at,
                    memory.updated_at,
                ),
            )

        self.logger.debug("Inserted memory", memory_id=memory.id, container_tag=container_tag)
        return memory

    @with_error_handling(error_level=ErrorLevel.WARNING, reraise=True)
    def get(self, memory_id: str) -> Memory | None:
        """Fetch a memory by id regardless of container or forgotten state."""
        with storage_operation("select_memory", table="memories"):
            row = self.connection.execute(MemoryQueries.GET_BY_ID, (memory_id,)).fetchone()
        return self._row_to_memory(row) if row else None

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def list_active(self, container_tags: Sequence[str], limit: int, offset: int = 0) -> MemoryPage:
        """Active memories of the given containers (union), newest first.

        Returns the requested page together with the total number of active
        memories across those containers.
        """
        tags = list(dict.fromkeys(container_tags))
        if not tags:
            return MemoryPage(memories=[], total=0)

        with storage_operation("select_active_memories", table="memories"):
            rows = self.connection.execute(
                MemoryQueries.list_active(len(tags)), (*tags, limit, offset)
            ).fetchall()
            total = self.connection.execute(MemoryQueries.count_active(len(tags)), tags).fetchone()["count"]

        return MemoryPage(memories=[self._row_to_memory(row) for row in rows], total=total)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def soft_delete_by_id(self, container_tag: str, memory_id: str) -> int:
        """Mark one active memory as forgotten. Returns the number of rows affected."""
        with storage_operation("update_forget_by_id", table="memories"):
            cursor = self.connection.execute(
                MemoryQueries.FORGET_BY_ID, (utc_timestamp(), memory_id, container_tag)
            )
        return cursor.rowcount

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def soft_delete_by_content(self, container_tag: str, content: str) -> int:
        """Mark every active memory with exactly ``content`` as forgotten."""
        with storage_operation("update_forget_by_content", table="memories"):
            cursor = self.connection.execute(
                MemoryQueries.FORGET_BY_CONTENT, (utc_timestamp(), content, container_tag)
            )
        return cursor.rowcount

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def hard_delete(self, memory_ids: Sequence[str]) -> int:
        """Remove rows by id, ignoring container and forgotten state."""
        ids = list(dict.fromkeys(memory_ids))
        if not ids:
            return 0

        with storage_operation("delete_memories", table="memories"):
            cursor = self.connection.execute(MemoryQueries.delete_by_ids(len(ids)), ids)
        return cursor.rowcount

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def wipe(self, container_tag: str) -> int:
        """Remove every memory of a container, forgotten or not."""
        with storage_operation("delete_container_memories", table="memories"):
            cursor = self.connection.execute(MemoryQueries.DELETE_CONTAINER, (container_tag,))
        return cursor.rowcount

    def count_active(self) -> int:
        """Active memories across all containers."""
        with storage_operation("select_count_active", table="memories"):
            return self.connection.execute(MemoryQueries.COUNT_ALL_ACTIVE).fetchone()["count"]

    def container_tags(self) -> list[str]:
        """Every container tag that owns at least one stored memory."""
        with storage_operation("select_containers", table="memories"):
            rows = self.connection.execute(MemoryQueries.DISTINCT_CONTAINERS).fetchall()
        return [row["container_tag"] for row in rows]

    @staticmethod
    def _row_to_memory(row: sqlite3.Row) -> Memory:
        metadata = row["metadata"]
        return Memory(
            id=row["id"],
            container_tag=row["container_tag"],
            content=row["content"],
            metadata=json.loads(metadata) if metadata else None,
            custom_id=row["custom_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            forgotten_at=row["forgotten_at"],
        )
