"""Profile fact domain models."""

from enum import Enum

from pydantic import BaseModel, Field

from .memory import ScoredMemory


class FactType(str, Enum):
    """Two-tier classification of profile facts."""

    DYNAMIC = "dynamic"  # recent, assigned on extraction
    STATIC = "static"  # promoted, considered durable


class ProfileFact(BaseModel):
    """A statement about the user derived from ingested text."""

    id: str
    container_tag: str
    fact: str
    fact_type: FactType = FactType.DYNAMIC
    created_at: str
    updated_at: str

    def __str__(self) -> str:
        return f"ProfileFact({self.fact_type.value}, '{self.fact[:50]}')"


class Profile(BaseModel):
    """Static and dynamic facts of a container, optionally with query matches."""

    static: list[str] = Field(default_factory=list)
    dynamic: list[str] = Field(default_factory=list)
    search_results: list[ScoredMemory] | None = None


class StoreStats(BaseModel):
    """Aggregate counts across all containers."""

    active_memory_count: int
    total_fact_count: int
    container_tags: list[str]
