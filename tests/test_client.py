"""Tests for the agent-side memory clients."""

import json

import httpx
import pytest

from local_supermemory.client import (
    ClientConfig,
    EmbeddedMemoryClient,
    HttpMemoryClient,
    container_tag_problem,
    create_client,
    default_container_tag,
    sanitize_content,
)
from local_supermemory.infrastructure.sqlite import Database
from local_supermemory.main import create_app


@pytest.fixture
def app(settings, database):
    """Application wired to an already-open database, without running the lifespan."""
    application = create_app(settings)
    application.state.database = database
    return application


@pytest.fixture(params=["http", "embedded"])
async def memory(request, app, database, logger):
    """Both variants must behave the same."""
    if request.param == "http":
        client = HttpMemoryClient(
            "agent_one",
            base_url="http://testserver",
            logger=logger,
            transport=httpx.ASGITransport(app=app),
        )
    else:
        client = EmbeddedMemoryClient(database, "agent_one", logger=logger)
    yield client
    await client.aclose()


class TestValidation:
    def test_default_container_tag(self):
        assert default_container_tag("my-laptop.local") == "openclaw_my_laptop_local"

    @pytest.mark.parametrize("tag", ["", "   ", "x" * 101, "has space", "emoji🙂", "tag\n"])
    def test_suspicious_tags(self, tag):
        assert container_tag_problem(tag) is not None

    @pytest.mark.parametrize("tag", ["openclaw_host", "user:42", "team.alpha-1"])
    def test_good_tags(self, tag):
        assert container_tag_problem(tag) is None

    def test_sanitize_content(self):
        assert sanitize_content("  hello\x00 world\x07\n ") == "hello world"
        assert sanitize_content("line one\nline two\tend") == "line one\nline two\tend"

    def test_bad_tag_only_warns(self, database, logger):
        client = EmbeddedMemoryClient(database, "not a valid tag!", logger=logger)
        assert client.available is True


class TestMemoryClient:
    @pytest.mark.asyncio
    async def test_add_and_search(self, memory):
        stored = await memory.add_memory("I prefer dark mode", metadata={"source": "chat"})
        assert stored is not None

        hits = await memory.search("dark mode")
        assert [hit.id for hit in hits] == [stored.id]
        assert hits[0].content == "I prefer dark mode"
        assert hits[0].similarity > 0.05

    @pytest.mark.asyncio
    async def test_add_sanitizes_and_skips_empty(self, memory):
        assert await memory.add_memory(" \x00 ") is None

        await memory.add_memory("  I prefer tea\x00  ")
        hits = await memory.search("prefer tea")
        assert hits[0].content == "I prefer tea"

    @pytest.mark.asyncio
    async def test_unencodable_metadata_is_rejected(self, memory):
        assert await memory.add_memory("I prefer tea", metadata={"when": object()}) is None
        assert memory.available is True
        assert await memory.search("prefer tea") == []

    @pytest.mark.asyncio
    async def test_container_override(self, memory):
        await memory.add_memory("I prefer dark mode", container_tag="other")
        assert await memory.search("dark mode") == []
        assert len(await memory.search("dark mode", container_tag="other")) == 1

    @pytest.mark.asyncio
    async def test_profile(self, memory):
        await memory.add_memory("I always drink green tea in the morning")

        profile = await memory.get_profile(query="green tea")
        assert profile.dynamic == ["I always drink green tea in the morning"]
        assert profile.static == []
        assert [match.memory for match in profile.search_results] == ["I always drink green tea in the morning"]

    @pytest.mark.asyncio
    async def test_delete_memory(self, memory):
        stored = await memory.add_memory("I prefer dark mode")

        outcome = await memory.delete_memory(stored.id)
        assert outcome.success
        assert (await memory.delete_memory(stored.id)).success is False
        assert await memory.search("dark mode") == []

    @pytest.mark.asyncio
    async def test_forget_by_query(self, memory):
        long_text = "I love dark mode " + "and a lot more detail " * 10
        await memory.add_memory(long_text)
        await memory.add_memory("buy oat milk")

        outcome = await memory.forget_by_query("dark mode")
        assert outcome.success
        assert outcome.preview == long_text[:100] + "..."
        assert await memory.search("dark mode") == []
        assert len(await memory.search("oat milk")) == 1

    @pytest.mark.asyncio
    async def test_forget_by_query_without_match(self, memory):
        outcome = await memory.forget_by_query("nothing stored")
        assert outcome.success is False

    @pytest.mark.asyncio
    async def test_wipe_all_memories(self, memory):
        for n in range(3):
            await memory.add_memory(f"memory number {n}")
        await memory.add_memory("kept elsewhere", container_tag="other")

        assert await memory.wipe_all_memories() == 3
        assert await memory.search("memory number") == []
        assert len(await memory.search("kept elsewhere", container_tag="other")) == 1

    @pytest.mark.asyncio
    async def test_check_health(self, memory):
        assert await memory.check_health() is True


class TestHttpDegradation:
    @pytest.mark.asyncio
    async def test_unreachable_server(self, logger):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = HttpMemoryClient("agent_one", logger=logger, transport=httpx.MockTransport(refuse))

        assert await client.search("dark mode") == []
        assert client.available is False
        assert await client.add_memory("I prefer dark mode") is None
        assert (await client.get_profile()).dynamic == []
        assert (await client.forget_by_query("dark mode")).success is False
        assert await client.wipe_all_memories() == 0
        assert await client.check_health() is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_recovers_after_health_check(self, logger):
        state = {"up": False}

        def handler(request: httpx.Request) -> httpx.Response:
            if not state["up"]:
                raise httpx.ConnectError("connection refused", request=request)
            if request.url.path == "/health":
                return httpx.Response(200, json={"status": "ok", "version": "1.0.0"})
            return httpx.Response(200, json={"results": [], "timing": 0, "total": 0})

        client = HttpMemoryClient("agent_one", logger=logger, transport=httpx.MockTransport(handler))
        await client.search("dark mode")
        assert client.available is False

        state["up"] = True
        assert await client.check_health() is True
        assert client.available is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_error_status_keeps_client_available(self, logger):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "disk I/O error"})

        client = HttpMemoryClient("agent_one", logger=logger, transport=httpx.MockTransport(handler))
        assert await client.search("dark mode") == []
        assert client.available is True
        await client.aclose()

    @pytest.mark.asyncio
    async def test_wipe_pages_and_batches(self, logger):
        ids = [f"id-{n}" for n in range(250)]
        listed_pages: list[int] = []
        deleted_batches: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if request.url.path.endswith("/documents/list"):
                page, limit = body["page"], body["limit"]
                listed_pages.append(page)
                chunk = ids[(page - 1) * limit : page * limit]
                return httpx.Response(
                    200,
                    json={
                        "memories": [{"id": i, "content": "", "createdAt": "", "updatedAt": ""} for i in chunk],
                        "pagination": {"page": page, "limit": limit, "total": len(ids), "totalPages": 3},
                    },
                )
            deleted_batches.append(len(body["ids"]))
            return httpx.Response(200, json={"deleted": len(body["ids"])})

        client = HttpMemoryClient("agent_one", logger=logger, transport=httpx.MockTransport(handler))
        assert await client.wipe_all_memories() == 250
        assert listed_pages == [1, 2, 3]
        assert deleted_batches == [100, 100, 50]
        await client.aclose()


class TestEmbeddedDegradation:
    @pytest.mark.asyncio
    async def test_data_dir_under_a_regular_file(self, tmp_path, logger):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        database = Database(blocker / "sub" / "memories.db", logger=logger)
        client = EmbeddedMemoryClient(database, "agent_one", logger=logger)

        assert await client.search("dark mode") == []
        assert client.available is False
        assert await client.add_memory("I prefer dark mode") is None
        assert await client.check_health() is False
        await client.aclose()


class TestFactory:
    def test_http_by_default(self, logger):
        client = create_client(ClientConfig(container_tag="agent_one"), logger=logger)
        assert isinstance(client, HttpMemoryClient)
        assert client.base_url == "http://localhost:3456"

    def test_embedded(self, tmp_path, logger):
        client = create_client(
            ClientConfig(mode="embedded", container_tag="agent_one", data_dir=tmp_path), logger=logger
        )
        assert isinstance(client, EmbeddedMemoryClient)
        assert client.database.path == tmp_path / "memories.db"

    def test_default_container_tag(self):
        assert ClientConfig().container_tag.startswith("openclaw_")
