"""Local memory store FastAPI application.

Persists short text memories per container, ranks them against queries by
lexical overlap and derives a lightweight user profile from what is stored.
"""

import time
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import logfire
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from local_supermemory import __version__
from local_supermemory.api.endpoints import admin, core, memory, profile
from local_supermemory.core.config import Settings
from local_supermemory.core.handlers import register_exception_handlers
from local_supermemory.core.logging import bind_log_context, clear_log_context, get_logger, setup_logging
from local_supermemory.domain.text import FactExtractor
from local_supermemory.infrastructure.sqlite import Database


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and everything it depends on.

    Args:
        settings: Process settings; read from the environment when omitted

    Returns:
        The configured FastAPI application
    """
    settings = settings or Settings()
    setup_logging(settings)
    logger = get_logger(settings.service_name)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        logger.info("🧠 Starting local memory store...", data_dir=str(settings.data_dir))

        database = Database(settings.db_path, logger=logger.bind(component="database"))
        database.initialize()
        app.state.database = database

        logger.info("✅ Ready to accept connections", host=settings.host, port=settings.port)
        try:
            yield
        finally:
            logger.info("🛑 Shutting down local memory store...")
            database.close()
            app.state.database = None
            logger.info("✅ Shutdown complete")

    app = FastAPI(
        title="Local Supermemory",
        description="Self-hosted memory and profile store for conversational agents",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.logger = logger
    app.state.fact_extractor = FactExtractor()
    app.state.database = None

    if settings.logfire_token:
        logfire.instrument_fastapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        clear_log_context()
        bind_log_context(request_id=str(uuid4()), method=request.method, path=request.url.path)
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Handled request",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    register_exception_handlers(app)

    app.include_router(core.router, tags=["health"])
    app.include_router(memory.router, prefix="/api/v1", tags=["memory"])
    app.include_router(profile.router, prefix="/api/v1/profile", tags=["profile"])
    app.include_router(admin.router, prefix="/api/v1", tags=["admin"])

    return app


def run() -> None:
    """Console entry point: serve until interrupted, then close the store."""
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
