"""Memory domain models."""

from typing import Any

from pydantic import BaseModel, Field


class Memory(BaseModel):
    """A stored text unit, owned by exactly one container for its lifetime."""

    id: str
    container_tag: str
    content: str
    metadata: dict[str, Any] | None = None
    custom_id: str | None = None
    created_at: str
    updated_at: str
    forgotten_at: str | None = None

    @property
    def is_active(self) -> bool:
        """Forgotten memories stay in storage but are hidden from reads."""
        return self.forgotten_at is None

    def __str__(self) -> str:
        return f"Memory(container={self.container_tag}, content='{self.content[:50]}')"


class ScoredMemory(BaseModel):
    """A memory together with its relevance to a query."""

    memory: Memory
    score: float = Field(ge=0.0, le=1.0)


class MemoryPage(BaseModel):
    """One page of active memories plus the total active count."""

    memories: list[Memory]
    total: int
