"""Store-wide statistics and container wipe."""

from fastapi import APIRouter, Depends

from local_supermemory.api.dependencies import get_maintenance_service
from local_supermemory.api.schemas import ApiModel
from local_supermemory.services import MaintenanceService

router = APIRouter()


class StatsResponse(ApiModel):
    memories: int
    facts: int
    containers: list[str]


class WipeResponse(ApiModel):
    wiped: bool = True
    container_tag: str


@router.get("/stats", response_model=StatsResponse, operation_id="stats")
def get_stats(maintenance_service: MaintenanceService = Depends(get_maintenance_service)) -> StatsResponse:
    """Active memories, all fact rows and known containers."""
    stats = maintenance_service.stats()
    return StatsResponse(
        memories=stats.active_memory_count,
        facts=stats.total_fact_count,
        containers=stats.container_tags,
    )


@router.delete("/container/{tag}", response_model=WipeResponse, operation_id="wipe_container")
def wipe_container(
    tag: str,
    maintenance_service: MaintenanceService = Depends(get_maintenance_service),
) -> WipeResponse:
    """Irreversibly delete every memory and fact of a container."""
    maintenance_service.wipe_container(tag)
    return WipeResponse(container_tag=tag)
