"""Shared fixtures: an isolated data directory per test."""

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from fastapi.testclient import TestClient

from local_supermemory.core.config import Settings
from local_supermemory.infrastructure.sqlite import Database
from local_supermemory.main import create_app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data", log_level="WARNING")


@pytest.fixture
def logger():
    return structlog.get_logger("tests")


@pytest.fixture
def database(settings: Settings, logger) -> Iterator[Database]:
    database = Database(settings.db_path, logger=logger)
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def connection(database: Database):
    with database.session() as conn:
        yield conn


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Test client with the application lifespan (database open) running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
