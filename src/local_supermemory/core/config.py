"""Configuration management."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings.

    Only the listening port and the data directory are meant to be tuned by
    operators; relevance thresholds and limits live next to the code that
    uses them.
    """

    # Server
    host: str = Field(default="127.0.0.1", description="Interface the HTTP server binds to")
    port: int = Field(default=3456, description="Port the HTTP server listens on")

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local-supermemory",
        description="Directory holding the sqlite database",
    )
    db_filename: str = Field(default="memories.db", description="Name of the sqlite database file")

    # Logging
    log_level: str = Field(default="INFO", description="Minimum level for emitted log lines")
    debug: bool = False
    logfire_token: str | None = Field(default=None, description="Send traces to Logfire when set")
    service_name: str = "local-supermemory"

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_SUPERMEMORY_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def db_path(self) -> Path:
        """Location of the sqlite database file."""
        return self.data_dir.expanduser() / self.db_filename
