"""Service layer: ingestion, retrieval and maintenance over the sqlite store."""

from .maintenance_service import ForgetResult, MaintenanceService, WipeResult
from .memory_service import DEFAULT_CONTAINER_TAG, MemoryService
from .retrieval_service import RetrievalService

__all__ = [
    "DEFAULT_CONTAINER_TAG",
    "ForgetResult",
    "MaintenanceService",
    "MemoryService",
    "RetrievalService",
    "WipeResult",
]
