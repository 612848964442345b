"""Choose a memory client variant from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from local_supermemory.core.config import Settings
from local_supermemory.core.logging import get_logger
from local_supermemory.infrastructure.sqlite import Database

from .base import MemoryClient
from .config import ClientConfig
from .embedded import EmbeddedMemoryClient
from .http_client import HttpMemoryClient

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def create_client(
    config: ClientConfig | None = None,
    logger: FilteringBoundLogger | None = None,
) -> MemoryClient:
    """Build the client variant ``config.mode`` asks for.

    Example:
        ```python
        async with create_client(ClientConfig(container_tag="my_agent")) as memory:
            await memory.add_memory("I prefer dark mode in every editor.")
            hits = await memory.search("dark mode")
        ```
    """
    config = config or ClientConfig()
    logger = logger or get_logger(__name__)

    if config.mode == "embedded":
        settings = Settings(data_dir=config.data_dir) if config.data_dir else Settings()
        database = Database(settings.db_path, logger=logger.bind(component="database"))
        logger.info("Using embedded memory store", path=str(settings.db_path), container_tag=config.container_tag)
        return EmbeddedMemoryClient(database, config.container_tag, debug=config.debug, logger=logger)

    logger.info("Using memory server", base_url=config.base_url, container_tag=config.container_tag)
    return HttpMemoryClient(
        config.container_tag,
        base_url=config.base_url,
        timeout=config.timeout,
        debug=config.debug,
        logger=logger,
    )
