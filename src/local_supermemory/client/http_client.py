"""Memory client for a running server."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx

from .base import BaseMemoryClient, DocumentPage, ProfileMatch, ProfileResult, SearchHit, StoredMemory
from .config import DEFAULT_BASE_URL

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

API_PREFIX = "/api/v1"


class HttpMemoryClient(BaseMemoryClient):
    """Talks to the memory server's JSON API.

    Connection problems and timeouts make the client unavailable until the
    next successful ``check_health()``; error statuses only fail the call
    at hand.
    """

    unavailable_errors = (httpx.TransportError,)
    rejected_errors = (httpx.HTTPStatusError, ValueError)

    def __init__(
        self,
        container_tag: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        debug: bool = False,
        logger: FilteringBoundLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(container_tag, debug=debug, logger=logger)
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._http.request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()

    async def _add(
        self, container_tag: str, content: str, metadata: dict[str, Any] | None, custom_id: str | None
    ) -> StoredMemory:
        payload: dict[str, Any] = {"content": content, "containerTag": container_tag}
        if metadata:
            try:
                json.dumps(metadata)
            except TypeError as e:
                raise ValueError(f"metadata must be JSON-serialisable: {e}") from e
            payload["metadata"] = metadata
        if custom_id:
            payload["customId"] = custom_id
        data = await self._request("POST", f"{API_PREFIX}/add", json=payload)
        return StoredMemory(id=data["id"], container_tag=container_tag)

    async def _search(self, container_tag: str, query: str, limit: int) -> list[SearchHit]:
        data = await self._request(
            "POST",
            f"{API_PREFIX}/search/memories",
            json={"q": query, "containerTag": container_tag, "limit": limit},
        )
        return [
            SearchHit(
                id=item["id"],
                content=item.get("memory", ""),
                similarity=item.get("similarity", 0.0),
                metadata=item.get("metadata"),
            )
            for item in data.get("results", [])
        ]

    async def _profile(self, container_tag: str, query: str | None) -> ProfileResult:
        params = {"containerTag": container_tag}
        if query:
            params["q"] = query
        data = await self._request("GET", f"{API_PREFIX}/profile", params=params)

        profile = data.get("profile", {})
        matches = (data.get("searchResults") or {}).get("results", [])
        return ProfileResult(
            static=profile.get("static", []),
            dynamic=profile.get("dynamic", []),
            search_results=[
                ProfileMatch(
                    memory=item.get("memory", ""),
                    similarity=item.get("similarity", 0.0),
                    updated_at=item.get("updatedAt"),
                )
                for item in matches
            ],
        )

    async def _forget(self, container_tag: str, memory_id: str) -> bool:
        data = await self._request(
            "POST",
            f"{API_PREFIX}/memories/forget",
            json={"id": memory_id, "containerTag": container_tag},
        )
        return bool(data.get("forgotten"))

    async def _list_documents(self, container_tag: str, limit: int, page: int) -> DocumentPage:
        data = await self._request(
            "POST",
            f"{API_PREFIX}/documents/list",
            json={"containerTags": [container_tag], "limit": limit, "page": page},
        )
        return DocumentPage(
            ids=[item["id"] for item in data.get("memories", [])],
            total_pages=data.get("pagination", {}).get("totalPages", 0),
        )

    async def _delete_bulk(self, memory_ids: list[str]) -> int:
        data = await self._request("POST", f"{API_PREFIX}/documents/deleteBulk", json={"ids": memory_ids})
        return int(data.get("deleted", 0))

    async def _health(self) -> bool:
        response = await self._http.get("/health")
        return response.status_code == httpx.codes.OK and response.json().get("status") == "ok"
