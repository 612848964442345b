"""SQLite database handle for the memory store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from structlog.typing import FilteringBoundLogger

from local_supermemory.core.base import DatabaseErrorDetails
from local_supermemory.core.errors import StorageError
from local_supermemory.core.logging import get_logger
from local_supermemory.infrastructure.sqlite.queries import SCHEMA


@contextmanager
def storage_operation(operation: str, table: str | None = None) -> Iterator[None]:
    """Translate ``sqlite3.Error`` raised inside the block into ``StorageError``."""
    try:
        yield
    except sqlite3.Error as e:
        raise StorageError(
            message=str(e),
            details=DatabaseErrorDetails(
                source="sqlite",
                operation=operation,
                table=table,
                query_type=operation.split("_", 1)[0],
            ),
        ) from e


class Database:
    """A sqlite file in WAL mode.

    Connections are short lived: every request opens its own through
    ``session()``. WAL lets readers proceed while a single writer commits.
    """

    def __init__(self, path: Path, logger: FilteringBoundLogger | None = None):
        self.path = Path(path)
        self.logger = logger or get_logger(__name__)
        self._initialized = False

    def _unreachable(self, operation: str, error: Exception) -> StorageError:
        return StorageError(
            message=f"Cannot open database at {self.path}: {error}",
            details=DatabaseErrorDetails(
                source="sqlite",
                operation=operation,
                database_path=str(self.path),
            ),
        )

    def connect(self) -> sqlite3.Connection:
        """Open a new connection.

        ``check_same_thread`` is off because the web framework may resolve a
        request's dependencies and run its handler on different worker threads;
        a connection is still only used by one request at a time.
        """
        try:
            conn = sqlite3.connect(self.path, timeout=5.0, check_same_thread=False)
        except (sqlite3.Error, OSError) as e:
            raise self._unreachable("connect", e) from e
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the data directory, enable WAL and create the schema."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._unreachable("initialize", e) from e
        conn = self.connect()
        try:
            with storage_operation("create_schema"):
                conn.execute("PRAGMA journal_mode = WAL")
                conn.executescript(SCHEMA)
                conn.commit()
        finally:
            conn.close()
        self._initialized = True
        self.logger.info("Database ready", path=str(self.path))

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that is closed when the block exits."""
        if not self._initialized:
            self.initialize()
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        """Fold the write-ahead log back into the main file.

        Called on shutdown so the database file is complete on disk.
        """
        if not self._initialized:
            return
        conn = self.connect()
        try:
            with storage_operation("checkpoint"):
                conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        finally:
            conn.close()
        self._initialized = False
        self.logger.info("Database closed", path=str(self.path))


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block as one atomic unit: commit on success, roll back on error."""
    with conn:
        yield conn
