"""Relevance search and profile assembly."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from local_supermemory.core.base import ErrorLevel
from local_supermemory.core.decorators import with_error_handling
from local_supermemory.core.logging import get_logger
from local_supermemory.domain.models import Memory, Profile, ScoredMemory
from local_supermemory.domain.text import score
from local_supermemory.infrastructure.repositories import MemoryRepository, ProfileRepository

if TYPE_CHECKING:
    import sqlite3

    from structlog.typing import FilteringBoundLogger

SEARCH_WORKING_SET = 1000
SEARCH_SCORE_FLOOR = 0.05
DEFAULT_SEARCH_LIMIT = 10

PROFILE_WORKING_SET = 500
PROFILE_DEFAULT_THRESHOLD = 0.1
PROFILE_SEARCH_LIMIT = 10
STATIC_FACT_LIMIT = 20
DYNAMIC_FACT_LIMIT = 30


def rank(query: str, memories: Sequence[Memory], floor: float, limit: int) -> list[ScoredMemory]:
    """Score ``memories`` against ``query`` and keep the best ``limit`` above ``floor``.

    ``memories`` arrive newest first; the sort is stable so equal scores keep
    that recency order.
    """
    scored = [ScoredMemory(memory=memory, score=score(query, memory.content)) for memory in memories]
    relevant = [result for result in scored if result.score > floor]
    relevant.sort(key=lambda result: result.score, reverse=True)
    return relevant[:limit]


class RetrievalService:
    """Answers search and profile requests for one or more containers."""

    def __init__(self, connection: sqlite3.Connection, logger: FilteringBoundLogger | None = None):
        self.connection = connection
        self.logger = logger or get_logger(__name__)

        self.memory_repo = MemoryRepository(connection, logger=self.logger)
        self.profile_repo = ProfileRepository(connection, logger=self.logger)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def search(
        self,
        container_tags: Sequence[str],
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[ScoredMemory]:
        """Most relevant active memories for ``query``, best first.

        Only the most recent ``SEARCH_WORKING_SET`` active memories are
        considered, and anything scoring at or below ``SEARCH_SCORE_FLOOR``
        is dropped.
        """
        if not query or limit < 1:
            return []

        candidates = self.memory_repo.list_active(container_tags, limit=SEARCH_WORKING_SET).memories
        results = rank(query, candidates, floor=SEARCH_SCORE_FLOOR, limit=limit)

        self.logger.info(
            "Searched memories",
            container_tags=list(container_tags),
            candidates=len(candidates),
            results=len(results),
        )
        return results

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    def profile(
        self,
        container_tag: str,
        query: str | None = None,
        threshold: float = PROFILE_DEFAULT_THRESHOLD,
    ) -> Profile:
        """Static and dynamic facts of a container.

        With a query, also returns up to ``PROFILE_SEARCH_LIMIT`` memories
        scoring strictly above ``threshold``; a higher threshold never yields
        more results.
        """
        static = self.profile_repo.list_static(container_tag, STATIC_FACT_LIMIT)
        dynamic = self.profile_repo.list_dynamic(container_tag, DYNAMIC_FACT_LIMIT)

        search_results: list[ScoredMemory] | None = None
        if query:
            candidates = self.memory_repo.list_active([container_tag], limit=PROFILE_WORKING_SET).memories
            search_results = rank(query, candidates, floor=threshold, limit=PROFILE_SEARCH_LIMIT)

        self.logger.info(
            "Built profile",
            container_tag=container_tag,
            static=len(static),
            dynamic=len(dynamic),
            search_results=len(search_results) if search_results is not None else None,
        )
        return Profile(static=static, dynamic=dynamic, search_results=search_results)
