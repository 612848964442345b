"""Shared request/response building blocks.

Payloads use camelCase on the wire and snake_case in Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from local_supermemory.services import DEFAULT_CONTAINER_TAG


class ApiModel(BaseModel):
    """Base for every request and response body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContainerScopedRequest(ApiModel):
    """A request addressed to one container.

    ``containerTag`` wins over ``containerTags[0]``; with neither the
    ``default`` container is used.
    """

    container_tag: str | None = None
    container_tags: list[str] | None = None

    @property
    def resolved_container_tag(self) -> str:
        if self.container_tag:
            return self.container_tag
        if self.container_tags:
            return self.container_tags[0]
        return DEFAULT_CONTAINER_TAG


class ErrorResponse(ApiModel):
    """Body of every non-2xx response."""

    error: str
    error_code: str | None = None
    trace_id: str | None = None
