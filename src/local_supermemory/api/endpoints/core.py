"""Health endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from local_supermemory import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str


@router.get("/health", response_model=HealthResponse, operation_id="health")
def health_check() -> HealthResponse:
    """Liveness check used by clients before enabling memory features."""
    return HealthResponse(status="ok", version=__version__)
