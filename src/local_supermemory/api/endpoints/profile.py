"""Profile API endpoints."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from local_supermemory.api.dependencies import get_maintenance_service, get_retrieval_service
from local_supermemory.api.schemas import ApiModel
from local_supermemory.services import DEFAULT_CONTAINER_TAG, MaintenanceService, RetrievalService
from local_supermemory.services.retrieval_service import PROFILE_DEFAULT_THRESHOLD

router = APIRouter()


class ProfileFacts(BaseModel):
    static: list[str]
    dynamic: list[str]


class ProfileSearchResult(ApiModel):
    id: str
    memory: str
    similarity: float
    updated_at: str


class ProfileSearchResults(ApiModel):
    results: list[ProfileSearchResult]
    timing: int = 0
    total: int


class ProfileResponse(ApiModel):
    profile: ProfileFacts
    search_results: ProfileSearchResults | None = None


class PromoteRequest(ApiModel):
    container_tag: str = DEFAULT_CONTAINER_TAG
    fact: str


class PromoteResponse(ApiModel):
    promoted: bool


@router.get(
    "",
    response_model=ProfileResponse,
    response_model_exclude_none=True,
    operation_id="get_profile",
)
def get_profile(
    container_tag: str = Query(DEFAULT_CONTAINER_TAG, alias="containerTag"),
    q: str | None = Query(None),
    threshold: float = Query(PROFILE_DEFAULT_THRESHOLD),
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
) -> ProfileResponse:
    """Durable and recent facts, plus query matches when ``q`` is given.

    ``searchResults`` is left out when the query matched nothing.
    """
    profile = retrieval_service.profile(container_tag, query=q, threshold=threshold)

    search_results = None
    if profile.search_results:
        search_results = ProfileSearchResults(
            results=[
                ProfileSearchResult(
                    id=item.memory.id,
                    memory=item.memory.content,
                    similarity=item.score,
                    updated_at=item.memory.updated_at,
                )
                for item in profile.search_results
            ],
            total=len(profile.search_results),
        )

    return ProfileResponse(
        profile=ProfileFacts(static=profile.static, dynamic=profile.dynamic),
        search_results=search_results,
    )


@router.post("/promote", response_model=PromoteResponse, operation_id="promote_fact")
def promote_fact(
    request: PromoteRequest,
    maintenance_service: MaintenanceService = Depends(get_maintenance_service),
) -> PromoteResponse:
    """Reclassify a recent fact as durable."""
    return PromoteResponse(promoted=maintenance_service.promote_fact(request.container_tag, request.fact))
