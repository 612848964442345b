"""Tests for the service layer."""

import pytest

from local_supermemory.core.base import DatabaseErrorDetails
from local_supermemory.core.errors import StorageError, ValidationError
from local_supermemory.domain.models import Memory
from local_supermemory.services import MaintenanceService, MemoryService, RetrievalService
from local_supermemory.services.retrieval_service import SEARCH_SCORE_FLOOR, rank


@pytest.fixture
def memory_service(connection, logger):
    return MemoryService(connection, logger=logger)


@pytest.fixture
def retrieval_service(connection, logger):
    return RetrievalService(connection, logger=logger)


@pytest.fixture
def maintenance_service(connection, logger):
    return MaintenanceService(connection, logger=logger)


class TestMemoryService:
    def test_create_records_dynamic_facts(self, memory_service, retrieval_service):
        memory_service.create("work", "I always drink green tea in the morning. It is cold.")

        profile = retrieval_service.profile("work")
        assert profile.dynamic == ["I always drink green tea in the morning"]
        assert profile.static == []
        assert profile.search_results is None

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_create_requires_content(self, memory_service, content):
        with pytest.raises(ValidationError, match="Content is required"):
            memory_service.create("work", content)

    def test_create_requires_container(self, memory_service):
        with pytest.raises(ValidationError):
            memory_service.create("", "I prefer tea")

    def test_create_is_atomic(self, memory_service, maintenance_service):
        def fail(*_args, **_kwargs):
            raise StorageError("disk full", details=DatabaseErrorDetails(source="test", operation="insert"))

        memory_service.profile_repo.record_dynamic_facts = fail

        with pytest.raises(StorageError):
            memory_service.create("work", "I prefer tea with honey")

        assert maintenance_service.stats().active_memory_count == 0
        assert memory_service.list_active(["work"], limit=10).total == 0

    def test_list_active_validates_paging(self, memory_service):
        with pytest.raises(ValidationError):
            memory_service.list_active(["work"], limit=0)
        with pytest.raises(ValidationError):
            memory_service.list_active(["work"], limit=10, offset=-1)


class TestRetrievalService:
    def test_round_trip(self, memory_service, retrieval_service):
        memory = memory_service.create("work", "I prefer dark mode")

        results = retrieval_service.search(["work"], "dark mode", limit=10)
        assert [r.memory.id for r in results] == [memory.id]
        assert results[0].score > SEARCH_SCORE_FLOOR

    def test_partition_isolation(self, memory_service, retrieval_service):
        memory_service.create("a", "I prefer dark mode")
        memory_service.create("b", "buy oat milk tomorrow")

        assert retrieval_service.search(["b"], "dark mode") == []
        assert [r.memory.container_tag for r in retrieval_service.search(["a"], "dark mode")] == ["a"]
        assert memory_service.list_active(["b"], limit=10).total == 1

    def test_empty_query(self, memory_service, retrieval_service):
        memory_service.create("work", "I prefer dark mode")
        assert retrieval_service.search(["work"], "") == []

    def test_results_sorted_and_limited(self, memory_service, retrieval_service):
        memory_service.create("work", "dark mode")
        memory_service.create("work", "dark roast coffee with a long list of unrelated words here")
        memory_service.create("work", "I love dark mode everywhere")

        results = retrieval_service.search(["work"], "dark mode", limit=2)
        assert len(results) == 2
        assert results[0].score >= results[1].score

    def test_forgotten_memories_not_searched(self, memory_service, retrieval_service, maintenance_service):
        memory = memory_service.create("work", "I prefer dark mode")
        maintenance_service.forget("work", memory_id=memory.id)
        assert retrieval_service.search(["work"], "dark mode") == []

    def test_profile_threshold_monotonic(self, memory_service, retrieval_service):
        for content in [
            "dark mode",
            "I love dark mode",
            "dark chocolate is my favourite treat after lunch",
            "the mode of transport was a bus going somewhere far away today",
        ]:
            memory_service.create("work", content)

        counts = [
            len(retrieval_service.profile("work", query="dark mode", threshold=t).search_results or [])
            for t in (0.0, 0.1, 0.3, 0.6, 0.9, 1.0)
        ]
        assert counts == sorted(counts, reverse=True)
        assert counts[0] > 0
        assert counts[-1] == 0

    def test_rank_is_stable_for_ties(self):
        memories = [
            Memory(id=str(n), container_tag="t", content="dark mode", created_at="x", updated_at="x")
            for n in range(3)
        ]
        assert [r.memory.id for r in rank("dark mode", memories, floor=0.05, limit=10)] == ["0", "1", "2"]


class TestMaintenanceService:
    def test_forget_requires_exactly_one_selector(self, maintenance_service):
        with pytest.raises(ValidationError, match="Either id or content is required"):
            maintenance_service.forget("work")
        with pytest.raises(ValidationError, match="Provide only one"):
            maintenance_service.forget("work", memory_id="x", content="y")

    def test_forget_unknown_reports_false(self, maintenance_service):
        result = maintenance_service.forget("work", memory_id="missing")
        assert result.forgotten is False

    def test_forget_by_content(self, memory_service, maintenance_service):
        memory_service.create("work", "buy milk")
        memory_service.create("work", "buy milk")
        result = maintenance_service.forget("work", content="buy milk")
        assert result.affected == 2

    def test_soft_deleted_memory_still_hard_deletable(self, memory_service, maintenance_service):
        memory = memory_service.create("work", "buy milk")
        maintenance_service.forget("work", memory_id=memory.id)

        assert maintenance_service.stats().active_memory_count == 0
        assert maintenance_service.bulk_delete([memory.id]) == 1

    def test_bulk_delete_requires_ids(self, maintenance_service):
        with pytest.raises(ValidationError, match="ids array is required"):
            maintenance_service.bulk_delete([])

    def test_promotion(self, memory_service, maintenance_service, retrieval_service):
        memory_service.create("work", "I always drink green tea in the morning")

        assert maintenance_service.promote_fact("work", "I always drink green tea in the morning") is True
        assert maintenance_service.promote_fact("work", "I always drink green tea in the morning") is False

        profile = retrieval_service.profile("work")
        assert profile.static == ["I always drink green tea in the morning"]
        assert profile.dynamic == []

    def test_facts_outlive_their_memory(self, memory_service, maintenance_service, retrieval_service):
        memory = memory_service.create("work", "I prefer tea over coffee")
        maintenance_service.forget("work", memory_id=memory.id)
        maintenance_service.bulk_delete([memory.id])

        assert retrieval_service.profile("work").dynamic == ["I prefer tea over coffee"]
        assert maintenance_service.stats().total_fact_count == 1

    def test_stats(self, memory_service, maintenance_service):
        memory_service.create("work", "I prefer tea over coffee")
        forgotten = memory_service.create("home", "feed the cat")
        maintenance_service.forget("home", memory_id=forgotten.id)

        stats = maintenance_service.stats()
        assert stats.active_memory_count == 1
        assert stats.total_fact_count == 1
        assert stats.container_tags == ["home", "work"]

    def test_wipe_container(self, memory_service, maintenance_service, retrieval_service):
        memory_service.create("work", "I prefer tea over coffee")
        memory_service.create("home", "I prefer cats over dogs")

        result = maintenance_service.wipe_container("work")
        assert (result.memories, result.facts) == (1, 1)
        assert retrieval_service.profile("work").dynamic == []
        assert maintenance_service.stats().container_tags == ["home"]
