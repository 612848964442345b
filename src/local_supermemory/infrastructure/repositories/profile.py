"""Repository for extracted profile facts.

Write methods do not commit; callers group them with
``local_supermemory.infrastructure.sqlite.transaction``.
"""

import sqlite3
from collections.abc import Sequence

from structlog.typing import FilteringBoundLogger

from local_supermemory.core.base import ErrorLevel
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.logging import get_logger
from local_supermemory.domain.models import FactType, ProfileFact
from local_supermemory.domain.models.utils import new_id, utc_timestamp
from local_supermemory.infrastructure.sqlite import storage_operation
from local_supermemory.infrastructure.sqlite.queries import ProfileQueries


class ProfileRepository:
    """Durable CRUD over ``profile_facts``, partitioned by container and fact type."""

    def __init__(self, connection: sqlite3.Connection, logger: FilteringBoundLogger | None = None):
        self.connection = connection
        self.logger = logger or get_logger(__name__)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def record_dynamic_facts(self, container_tag: str, facts: Sequence[str]) -> list[ProfileFact]:
        """Insert one dynamic row per fact; repeated text becomes repeated rows."""
        now = utc_timestamp()
        records = [
            ProfileFact(
                id=new_id(),
                container_tag=container_tag,
                fact=fact,
                fact_type=FactType.DYNAMIC,
                created_at=now,
                updated_at=now,
            )
            for fact in facts
        ]
        if not records:
            return []

        with storage_operation("insert_facts", table="profile_facts"):
            self.connection.executemany(
                ProfileQueries.INSERT,
                [
                    (r.id, r.container_tag, r.fact, r.fact_type.value, r.created_at, r.updated_at)
                    for r in records
                ],
            )

        self.logger.debug("Recorded dynamic facts", container_tag=container_tag, count=len(records))
        return records

    def list_static(self, container_tag: str, limit: int) -> list[str]:
        """Distinct static fact texts, most recently updated first."""
        return self._list_distinct(container_tag, FactType.STATIC, limit)

    def list_dynamic(self, container_tag: str, limit: int) -> list[str]:
        """Distinct dynamic fact texts, most recently updated first."""
        return self._list_distinct(container_tag, FactType.DYNAMIC, limit)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def promote(self, container_tag: str, fact: str) -> bool:
        """Flip every dynamic row with this text to static.

        Returns whether any row changed; promoting an already-static or
        unknown fact is a no-op.
        """
        with storage_operation("update_promote", table="profile_facts"):
            cursor = self.connection.execute(ProfileQueries.PROMOTE, (utc_timestamp(), container_tag, fact))
        return cursor.rowcount > 0

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def wipe(self, container_tag: str) -> int:
        """Remove every fact row of a container."""
        with storage_operation("delete_container_facts", table="profile_facts"):
            cursor = self.connection.execute(ProfileQueries.DELETE_CONTAINER, (container_tag,))
        return cursor.rowcount

    def count(self) -> int:
        """Fact rows across all containers and both tiers."""
        with storage_operation("select_count_facts", table="profile_facts"):
            return self.connection.execute(ProfileQueries.COUNT_ALL).fetchone()["count"]

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def _list_distinct(self, container_tag: str, fact_type: FactType, limit: int) -> list[str]:
        with storage_operation("select_distinct_facts", table="profile_facts"):
            rows = self.connection.execute(
                ProfileQueries.LIST_DISTINCT_BY_TYPE, (container_tag, fact_type.value, limit)
            ).fetchall()
        return [row["fact"] for row in rows]
