"""API dependencies.

Everything a request needs is built from ``app.state``, which the application
factory fills in; there are no module-level service singletons.
"""

import sqlite3
from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from structlog.typing import FilteringBoundLogger

from local_supermemory.infrastructure.sqlite import Database
from local_supermemory.services import MaintenanceService, MemoryService, RetrievalService


def get_database(request: Request) -> Database:
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(status_code=503, detail="Database not initialized")
    return database


def _component_logger(request: Request, component: str) -> FilteringBoundLogger:
    return request.app.state.logger.bind(component=component)


def get_connection(database: Database = Depends(get_database)) -> Iterator[sqlite3.Connection]:
    """One connection per request, closed once the response is produced."""
    with database.session() as connection:
        yield connection


def get_memory_service(
    request: Request,
    connection: sqlite3.Connection = Depends(get_connection),
) -> MemoryService:
    return MemoryService(
        connection,
        extractor=request.app.state.fact_extractor,
        logger=_component_logger(request, "memory_service"),
    )


def get_retrieval_service(
    request: Request,
    connection: sqlite3.Connection = Depends(get_connection),
) -> RetrievalService:
    return RetrievalService(connection, logger=_component_logger(request, "retrieval_service"))


def get_maintenance_service(
    request: Request,
    connection: sqlite3.Connection = Depends(get_connection),
) -> MaintenanceService:
    return MaintenanceService(connection, logger=_component_logger(request, "maintenance_service"))
