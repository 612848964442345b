"""Client configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from .validation import default_container_tag

DEFAULT_BASE_URL = "http://localhost:3456"


class ClientConfig(BaseModel):
    """How an agent reaches its memory store.

    ``mode="http"`` talks to a running server at ``base_url``;
    ``mode="embedded"`` opens the sqlite file under ``data_dir`` in-process.
    """

    mode: Literal["http", "embedded"] = "http"
    base_url: str = DEFAULT_BASE_URL
    container_tag: str = Field(default_factory=default_container_tag)
    timeout: float = Field(default=10.0, gt=0)
    data_dir: Path | None = None
    debug: bool = False
