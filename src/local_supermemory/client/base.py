"""The capability set shared by every memory client.

Agents hold a ``MemoryClient`` and never learn whether it talks to a server
or to a local database file. Both variants degrade instead of failing: when
the store cannot be reached the client logs a warning, marks itself
unavailable and answers with empty results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from pydantic import BaseModel, Field

from local_supermemory.core.logging import get_logger

from .validation import container_tag_problem, sanitize_content

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

T = TypeVar("T")

DEFAULT_RECALL_LIMIT = 5
FORGET_CANDIDATES = 5
PREVIEW_LENGTH = 100
WIPE_PAGE_SIZE = 100
WIPE_BATCH_SIZE = 100


class SearchHit(BaseModel):
    """A recalled memory with its relevance."""

    id: str
    content: str
    similarity: float = 0.0
    metadata: dict[str, Any] | None = None


class ProfileMatch(BaseModel):
    """A memory returned alongside a profile."""

    memory: str
    similarity: float = 0.0
    updated_at: str | None = None


class ProfileResult(BaseModel):
    """Facts about the user, optionally with memories matching a query."""

    static: list[str] = Field(default_factory=list)
    dynamic: list[str] = Field(default_factory=list)
    search_results: list[ProfileMatch] = Field(default_factory=list)


class StoredMemory(BaseModel):
    id: str
    container_tag: str


class ForgetOutcome(BaseModel):
    """Result of forgetting a memory; ``preview`` names what was forgotten."""

    success: bool
    message: str
    id: str | None = None
    preview: str | None = None


class DocumentPage(BaseModel):
    ids: list[str]
    total_pages: int


class MemoryClient(Protocol):
    """What an agent can do with its memory."""

    container_tag: str
    available: bool

    async def add_memory(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        custom_id: str | None = None,
        container_tag: str | None = None,
    ) -> StoredMemory | None:
        """Store a memory."""
        ...

    async def search(
        self, query: str, limit: int = DEFAULT_RECALL_LIMIT, container_tag: str | None = None
    ) -> list[SearchHit]:
        """Recall memories relevant to ``query``."""
        ...

    async def get_profile(self, query: str | None = None, container_tag: str | None = None) -> ProfileResult:
        """Fetch the user profile."""
        ...

    async def delete_memory(self, memory_id: str, container_tag: str | None = None) -> ForgetOutcome:
        """Forget a memory by id."""
        ...

    async def forget_by_query(self, query: str, container_tag: str | None = None) -> ForgetOutcome:
        """Forget the memory that best matches ``query``."""
        ...

    async def wipe_all_memories(self) -> int:
        """Hard-delete every memory of the client's container."""
        ...

    async def check_health(self) -> bool:
        """Whether the store answers."""
        ...

    async def aclose(self) -> None:
        """Release transport resources."""
        ...

    async def __aenter__(self) -> MemoryClient: ...

    async def __aexit__(self, *exc_info: object) -> None: ...


class BaseMemoryClient(ABC):
    """Shared behaviour of the client variants.

    Subclasses implement the transport primitives (``_add``, ``_search`` and
    friends) and declare which exceptions mean "store unreachable"
    (``unavailable_errors``) and which mean "request refused"
    (``rejected_errors``).
    """

    unavailable_errors: tuple[type[Exception], ...] = ()
    rejected_errors: tuple[type[Exception], ...] = ()

    def __init__(
        self,
        container_tag: str,
        debug: bool = False,
        logger: FilteringBoundLogger | None = None,
    ):
        self.container_tag = container_tag
        self.debug = debug
        self.available = True
        self.logger = (logger or get_logger(__name__)).bind(client=type(self).__name__)

        problem = container_tag_problem(container_tag)
        if problem:
            self.logger.warning("Suspicious container tag", container_tag=container_tag, problem=problem)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Nothing to release by default."""

    # Transport primitives

    @abstractmethod
    async def _add(
        self, container_tag: str, content: str, metadata: dict[str, Any] | None, custom_id: str | None
    ) -> StoredMemory: ...

    @abstractmethod
    async def _search(self, container_tag: str, query: str, limit: int) -> list[SearchHit]: ...

    @abstractmethod
    async def _profile(self, container_tag: str, query: str | None) -> ProfileResult: ...

    @abstractmethod
    async def _forget(self, container_tag: str, memory_id: str) -> bool: ...

    @abstractmethod
    async def _list_documents(self, container_tag: str, limit: int, page: int) -> DocumentPage: ...

    @abstractmethod
    async def _delete_bulk(self, memory_ids: list[str]) -> int: ...

    @abstractmethod
    async def _health(self) -> bool: ...

    # Helpers

    def _tag(self, container_tag: str | None) -> str:
        return container_tag or self.container_tag

    def _debug_request(self, operation: str, **fields: Any) -> None:
        if self.debug:
            self.logger.debug("Memory request", operation=operation, **fields)

    def _debug_response(self, operation: str, **fields: Any) -> None:
        if self.debug:
            self.logger.debug("Memory response", operation=operation, **fields)

    async def _call(self, operation: str, call: Callable[[], Awaitable[T]], fallback: T) -> T:
        """Run a primitive, turning transport failures into ``fallback``."""
        if not self.available:
            self.logger.debug("Memory store unavailable, skipping", operation=operation)
            return fallback

        try:
            return await call()
        except self.unavailable_errors as e:
            self.available = False
            self.logger.warning("Memory store unreachable", operation=operation, error=str(e))
        except self.rejected_errors as e:
            self.logger.warning("Memory request rejected", operation=operation, error=str(e))
        return fallback

    # Operations

    async def add_memory(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        custom_id: str | None = None,
        container_tag: str | None = None,
    ) -> StoredMemory | None:
        cleaned = sanitize_content(content)
        if not cleaned:
            self.logger.warning("Refusing to store empty memory")
            return None

        tag = self._tag(container_tag)
        self._debug_request("add", container_tag=tag, content_length=len(cleaned), custom_id=custom_id)
        stored = await self._call("add", lambda: self._add(tag, cleaned, metadata, custom_id), None)
        self._debug_response("add", id=stored.id if stored else None)
        return stored

    async def search(
        self, query: str, limit: int = DEFAULT_RECALL_LIMIT, container_tag: str | None = None
    ) -> list[SearchHit]:
        tag = self._tag(container_tag)
        self._debug_request("search", container_tag=tag, query=query, limit=limit)
        hits = await self._call("search", lambda: self._search(tag, query, limit), [])
        self._debug_response("search", results=len(hits))
        return hits

    async def get_profile(self, query: str | None = None, container_tag: str | None = None) -> ProfileResult:
        tag = self._tag(container_tag)
        self._debug_request("profile", container_tag=tag, query=query)
        profile = await self._call("profile", lambda: self._profile(tag, query), ProfileResult())
        self._debug_response(
            "profile",
            static=len(profile.static),
            dynamic=len(profile.dynamic),
            search_results=len(profile.search_results),
        )
        return profile

    async def delete_memory(self, memory_id: str, container_tag: str | None = None) -> ForgetOutcome:
        tag = self._tag(container_tag)
        self._debug_request("forget", container_tag=tag, id=memory_id)
        forgotten = await self._call("forget", lambda: self._forget(tag, memory_id), False)
        self._debug_response("forget", forgotten=forgotten)
        if not forgotten:
            return ForgetOutcome(success=False, message=f"Memory {memory_id} not found", id=memory_id)
        return ForgetOutcome(success=True, message=f"Forgot memory {memory_id}", id=memory_id)

    async def forget_by_query(self, query: str, container_tag: str | None = None) -> ForgetOutcome:
        """Search the top candidates and forget the single best match."""
        hits = await self.search(query, limit=FORGET_CANDIDATES, container_tag=container_tag)
        if not hits:
            return ForgetOutcome(success=False, message="No matching memory found to forget.")

        best = hits[0]
        preview = best.content
        if len(preview) > PREVIEW_LENGTH:
            preview = preview[:PREVIEW_LENGTH] + "..."

        outcome = await self.delete_memory(best.id, container_tag=container_tag)
        if not outcome.success:
            return outcome
        return ForgetOutcome(success=True, message=f'Forgot: "{preview}"', id=best.id, preview=preview)

    async def wipe_all_memories(self) -> int:
        """Page through every document of the container, then delete them in batches."""
        tag = self.container_tag
        empty = DocumentPage(ids=[], total_pages=0)

        ids: list[str] = []
        page = 1
        while True:
            current = page
            listing = await self._call(
                "list_documents", lambda: self._list_documents(tag, WIPE_PAGE_SIZE, current), empty
            )
            ids.extend(listing.ids)
            if not listing.ids or page >= listing.total_pages:
                break
            page += 1

        deleted = 0
        for start in range(0, len(ids), WIPE_BATCH_SIZE):
            batch = ids[start : start + WIPE_BATCH_SIZE]
            deleted += await self._call("delete_bulk", lambda: self._delete_bulk(batch), 0)

        self.logger.info("Wiped memories", container_tag=tag, listed=len(ids), deleted=deleted)
        return deleted

    async def check_health(self) -> bool:
        """Ask the store for its health; a healthy answer makes the client available again."""
        try:
            healthy = await self._health()
        except (*self.unavailable_errors, *self.rejected_errors) as e:
            self.logger.warning("Memory store health check failed", error=str(e))
            healthy = False
        self.available = healthy
        return healthy
