"""Memory API endpoints: add, search, forget, list and bulk delete."""

import math
import time
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field, model_validator

from local_supermemory.api.dependencies import get_maintenance_service, get_memory_service, get_retrieval_service
from local_supermemory.api.schemas import ApiModel, ContainerScopedRequest
from local_supermemory.services import DEFAULT_CONTAINER_TAG, MaintenanceService, MemoryService, RetrievalService

router = APIRouter()

# Keeps the sqlite OFFSET within a signed 64-bit integer
MAX_PAGE_SIZE = 10_000
MAX_PAGE = 2**31


class AddMemoryRequest(ContainerScopedRequest):
    """Request model for storing a memory."""

    content: str | None = None
    metadata: dict[str, Any] | None = None
    custom_id: str | None = None

    @model_validator(mode="after")
    def require_content(self) -> "AddMemoryRequest":
        if not self.content or not self.content.strip():
            raise ValueError("Content is required")
        return self


class AddMemoryResponse(ApiModel):
    id: str
    created: bool = True


class SearchRequest(ContainerScopedRequest):
    """Request model for searching memories; ``q`` and ``query`` are synonyms."""

    q: str | None = None
    query: str | None = None
    limit: int = Field(default=10, ge=1)

    @property
    def search_query(self) -> str:
        return self.q or self.query or ""


class SearchResult(ApiModel):
    id: str
    memory: str
    similarity: float
    metadata: dict[str, Any] | None = None
    created_at: str
    updated_at: str


class SearchResponse(ApiModel):
    results: list[SearchResult]
    timing: int = Field(description="Milliseconds spent searching")
    total: int


class ForgetRequest(ContainerScopedRequest):
    """Soft-delete by ``id`` or by exact ``content``; exactly one is required."""

    id: str | None = None
    content: str | None = None

    @model_validator(mode="after")
    def require_single_selector(self) -> "ForgetRequest":
        if not self.id and not self.content:
            raise ValueError("Either id or content is required")
        if self.id and self.content:
            raise ValueError("Provide only one of id or content")
        return self


class ForgetResponse(ApiModel):
    id: str
    forgotten: bool


class ListDocumentsRequest(ApiModel):
    container_tags: list[str] = Field(default_factory=lambda: [DEFAULT_CONTAINER_TAG], min_length=1)
    limit: int = Field(default=100, ge=1, le=MAX_PAGE_SIZE)
    page: int = Field(default=1, ge=1, le=MAX_PAGE)


class DocumentSummary(ApiModel):
    id: str
    content: str
    created_at: str
    updated_at: str


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ListDocumentsResponse(ApiModel):
    memories: list[DocumentSummary]
    pagination: Pagination


class DeleteBulkRequest(ApiModel):
    ids: list[str] | None = None

    @model_validator(mode="after")
    def require_ids(self) -> "DeleteBulkRequest":
        if not self.ids:
            raise ValueError("ids array is required")
        return self


class DeleteBulkResponse(ApiModel):
    deleted: int


@router.post("/add", response_model=AddMemoryResponse, operation_id="add_memory")
def add_memory(
    request: AddMemoryRequest,
    memory_service: MemoryService = Depends(get_memory_service),
) -> AddMemoryResponse:
    """Store a memory and derive profile facts from it."""
    memory = memory_service.create(
        container_tag=request.resolved_container_tag,
        content=request.content or "",
        metadata=request.metadata,
        custom_id=request.custom_id,
    )
    return AddMemoryResponse(id=memory.id)


@router.post("/search/memories", response_model=SearchResponse, operation_id="search_memories")
def search_memories(
    request: SearchRequest,
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
) -> SearchResponse:
    """Rank a container's active memories against a query."""
    if not request.search_query:
        return SearchResponse(results=[], timing=0, total=0)

    started = time.perf_counter()
    scored = retrieval_service.search(
        [request.resolved_container_tag],
        request.search_query,
        limit=request.limit,
    )
    timing = round((time.perf_counter() - started) * 1000)

    results = [
        SearchResult(
            id=item.memory.id,
            memory=item.memory.content,
            similarity=item.score,
            metadata=item.memory.metadata,
            created_at=item.memory.created_at,
            updated_at=item.memory.updated_at,
        )
        for item in scored
    ]
    return SearchResponse(results=results, timing=timing, total=len(results))


@router.post("/memories/forget", response_model=ForgetResponse, operation_id="forget_memory")
def forget_memory(
    request: ForgetRequest,
    maintenance_service: MaintenanceService = Depends(get_maintenance_service),
) -> ForgetResponse:
    """Hide a memory from search, listing and stats without deleting it."""
    result = maintenance_service.forget(
        request.resolved_container_tag,
        memory_id=request.id,
        content=request.content,
    )
    return ForgetResponse(id=request.id or "content-match", forgotten=result.forgotten)


@router.post("/documents/list", response_model=ListDocumentsResponse, operation_id="list_documents")
def list_documents(
    request: ListDocumentsRequest,
    memory_service: MemoryService = Depends(get_memory_service),
) -> ListDocumentsResponse:
    """Page through the active memories of one or more containers, newest first."""
    page = memory_service.list_active(
        request.container_tags,
        limit=request.limit,
        offset=(request.page - 1) * request.limit,
    )
    return ListDocumentsResponse(
        memories=[
            DocumentSummary(
                id=memory.id,
                content=memory.content,
                created_at=memory.created_at,
                updated_at=memory.updated_at,
            )
            for memory in page.memories
        ],
        pagination=Pagination(
            page=request.page,
            limit=request.limit,
            total=page.total,
            total_pages=math.ceil(page.total / request.limit),
        ),
    )


@router.post("/documents/deleteBulk", response_model=DeleteBulkResponse, operation_id="delete_bulk")
def delete_bulk(
    request: DeleteBulkRequest,
    maintenance_service: MaintenanceService = Depends(get_maintenance_service),
) -> DeleteBulkResponse:
    """Permanently remove memories by id."""
    return DeleteBulkResponse(deleted=maintenance_service.bulk_delete(request.ids or []))
