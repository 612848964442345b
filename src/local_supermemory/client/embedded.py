"""Memory client that runs the store in-process."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from local_supermemory.core.errors import StorageError, ValidationError
from local_supermemory.domain.text import FactExtractor
from local_supermemory.infrastructure.sqlite import storage_operation
from local_supermemory.services import MaintenanceService, MemoryService, RetrievalService
from local_supermemory.services.retrieval_service import PROFILE_DEFAULT_THRESHOLD

from .base import BaseMemoryClient, DocumentPage, ProfileMatch, ProfileResult, SearchHit, StoredMemory

if TYPE_CHECKING:
    import sqlite3

    from structlog.typing import FilteringBoundLogger

    from local_supermemory.infrastructure.sqlite import Database

T = TypeVar("T")


class EmbeddedMemoryClient(BaseMemoryClient):
    """Runs the service layer directly against a sqlite ``Database``.

    Each operation opens its own connection on a worker thread, the same
    way a server request would.
    """

    unavailable_errors = (StorageError,)
    rejected_errors = (ValidationError,)

    def __init__(
        self,
        database: Database,
        container_tag: str,
        extractor: FactExtractor | None = None,
        debug: bool = False,
        logger: FilteringBoundLogger | None = None,
    ):
        super().__init__(container_tag, debug=debug, logger=logger)
        self.database = database
        self.extractor = extractor or FactExtractor()

    async def aclose(self) -> None:
        await asyncio.to_thread(self.database.close)

    async def _run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        def run_in_session() -> T:
            with self.database.session() as connection:
                return work(connection)

        return await asyncio.to_thread(run_in_session)

    async def _add(
        self, container_tag: str, content: str, metadata: dict[str, Any] | None, custom_id: str | None
    ) -> StoredMemory:
        memory = await self._run(
            lambda conn: MemoryService(conn, extractor=self.extractor, logger=self.logger).create(
                container_tag, content, metadata=metadata, custom_id=custom_id
            )
        )
        return StoredMemory(id=memory.id, container_tag=memory.container_tag)

    async def _search(self, container_tag: str, query: str, limit: int) -> list[SearchHit]:
        scored = await self._run(
            lambda conn: RetrievalService(conn, logger=self.logger).search([container_tag], query, limit=limit)
        )
        return [
            SearchHit(
                id=item.memory.id,
                content=item.memory.content,
                similarity=item.score,
                metadata=item.memory.metadata,
            )
            for item in scored
        ]

    async def _profile(self, container_tag: str, query: str | None) -> ProfileResult:
        profile = await self._run(
            lambda conn: RetrievalService(conn, logger=self.logger).profile(
                container_tag, query=query, threshold=PROFILE_DEFAULT_THRESHOLD
            )
        )
        return ProfileResult(
            static=profile.static,
            dynamic=profile.dynamic,
            search_results=[
                ProfileMatch(memory=item.memory.content, similarity=item.score, updated_at=item.memory.updated_at)
                for item in profile.search_results or []
            ],
        )

    async def _forget(self, container_tag: str, memory_id: str) -> bool:
        result = await self._run(
            lambda conn: MaintenanceService(conn, logger=self.logger).forget(container_tag, memory_id=memory_id)
        )
        return result.forgotten

    async def _list_documents(self, container_tag: str, limit: int, page: int) -> DocumentPage:
        listing = await self._run(
            lambda conn: MemoryService(conn, extractor=self.extractor, logger=self.logger).list_active(
                [container_tag], limit=limit, offset=(page - 1) * limit
            )
        )
        return DocumentPage(
            ids=[memory.id for memory in listing.memories],
            total_pages=math.ceil(listing.total / limit),
        )

    async def _delete_bulk(self, memory_ids: list[str]) -> int:
        return await self._run(lambda conn: MaintenanceService(conn, logger=self.logger).bulk_delete(memory_ids))

    async def _health(self) -> bool:
        def ping(conn: sqlite3.Connection) -> bool:
            with storage_operation("health_check"):
                return conn.execute("SELECT 1").fetchone() is not None

        return await self._run(ping)
