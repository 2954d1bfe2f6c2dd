"""
Unit tests for the in-memory document store.

Covers single-document writes, filtered queries, batches and the
transaction contract (buffered writes, abort on error, serialization).
"""

import asyncio

import pytest

from shared.documents.base import Filter, Increment, OrderBy, split_path
from shared.documents.memory_store import InMemoryDocumentStore
from shared.exceptions import DocumentAlreadyExistsError, InvalidArgumentError, NotFoundError


class TestPaths:
    """Tests for document path handling."""

    def test_split_path(self):
        """Test splitting a nested document path."""
        assert split_path("users/u1/thoughts/t1") == ("users/u1/thoughts", "t1")

    @pytest.mark.parametrize("path", ["users", "users/u1/thoughts", "", "/"])
    def test_split_path_rejects_collections(self, path):
        """Test that collection paths are not document paths."""
        with pytest.raises(InvalidArgumentError):
            split_path(path)


class TestDocumentWrites:
    """Tests for single-document operations."""

    @pytest.mark.asyncio
    async def test_get_missing_document(self, store):
        """Test reading a document that does not exist."""
        snapshot = await store.get("users/u1/thoughts/t1")

        assert snapshot.exists is False
        assert snapshot.id == "t1"
        assert snapshot.get("text", "fallback") == "fallback"
        assert snapshot.to_dict() == {}

    @pytest.mark.asyncio
    async def test_set_replaces_and_merge_keeps_fields(self, store):
        """Test set semantics with and without merge."""
        await store.set("users/u1", {"a": 1, "b": 2})
        await store.set("users/u1", {"b": 3}, merge=True)
        assert (await store.get("users/u1")).data == {"a": 1, "b": 3}

        await store.set("users/u1", {"c": 4})
        assert (await store.get("users/u1")).data == {"c": 4}

    @pytest.mark.asyncio
    async def test_create_fails_when_document_exists(self, store):
        """Test that create refuses an occupied path."""
        await store.create("users/u1", {"a": 1})

        with pytest.raises(DocumentAlreadyExistsError):
            await store.create("users/u1", {"a": 2})

        assert (await store.get("users/u1")).data == {"a": 1}

    @pytest.mark.asyncio
    async def test_update_requires_existing_document(self, store):
        """Test that update fails on a missing document."""
        with pytest.raises(NotFoundError):
            await store.update("users/u1", {"a": 1})

    @pytest.mark.asyncio
    async def test_update_with_increment(self, store):
        """Test numeric increments, starting from zero when absent."""
        await store.set("users/u1/processingQueue/j1", {"status": "queued"})

        await store.update("users/u1/processingQueue/j1", {"attempts": Increment(1)})
        await store.update("users/u1/processingQueue/j1", {"attempts": Increment(2)})

        snapshot = await store.get("users/u1/processingQueue/j1")
        assert snapshot.get("attempts") == 3
        assert snapshot.get("status") == "queued"

    @pytest.mark.asyncio
    async def test_returned_data_is_a_copy(self, store):
        """Test that mutating a snapshot does not mutate the store."""
        await store.set("users/u1", {"tags": ["a"]})

        snapshot = await store.get("users/u1")
        snapshot.data["tags"].append("b")

        assert (await store.get("users/u1")).data == {"tags": ["a"]}

    @pytest.mark.asyncio
    async def test_add_generates_id(self, store):
        """Test adding a document with a generated id."""
        document_id = await store.add("users/u1/llmLogs", {"prompt": "p"})

        assert document_id
        assert (await store.get(f"users/u1/llmLogs/{document_id}")).exists

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, store):
        """Test deleting a missing document."""
        await store.delete("users/u1")
        assert (await store.get("users/u1")).exists is False


class TestQueries:
    """Tests for collection queries."""

    @pytest.fixture
    def jobs_store(self):
        """Store with jobs in two users' queues."""
        return InMemoryDocumentStore(
            {
                "users/u1/processingQueue/j1": {"thoughtId": "t1", "status": "queued"},
                "users/u1/processingQueue/j2": {"thoughtId": "t1", "status": "completed"},
                "users/u1/processingQueue/j3": {"thoughtId": "t2", "status": "processing"},
                "users/u1/processingQueue/j4": {"status": "queued"},
                "users/u2/processingQueue/j5": {"thoughtId": "t1", "status": "queued"},
            }
        )

    @pytest.mark.asyncio
    async def test_query_direct_children_only(self, jobs_store):
        """Test that queries stay inside one collection."""
        snapshots = await jobs_store.query("users/u1/processingQueue")
        assert [snap.id for snap in snapshots] == ["j1", "j2", "j3", "j4"]

    @pytest.mark.asyncio
    async def test_equality_and_in_filters(self, jobs_store):
        """Test combining an equality filter with an in filter."""
        snapshots = await jobs_store.query(
            "users/u1/processingQueue",
            filters=[
                Filter("thoughtId", "==", "t1"),
                Filter("status", "in", ["queued", "processing"]),
            ],
        )
        assert [snap.id for snap in snapshots] == ["j1"]

    @pytest.mark.asyncio
    async def test_not_equal_requires_field(self, jobs_store):
        """Test that != skips documents without the field."""
        snapshots = await jobs_store.query(
            "users/u1/processingQueue", filters=[Filter("thoughtId", "!=", "t1")]
        )
        assert [snap.id for snap in snapshots] == ["j3"]

    @pytest.mark.asyncio
    async def test_order_and_limit(self, store):
        """Test descending order with a limit."""
        for index, created in enumerate([3, 1, 2]):
            await store.set(f"users/u1/moods/m{index}", {"createdAt": created})

        snapshots = await store.query(
            "users/u1/moods", order_by=OrderBy("createdAt", descending=True), limit=2
        )
        assert [snap.get("createdAt") for snap in snapshots] == [3, 2]


class TestBatches:
    """Tests for write batches."""

    @pytest.mark.asyncio
    async def test_batch_commits_all_writes(self, store):
        """Test that a batch applies every write."""
        batch = store.batch()
        batch.set("users/u1", {"a": 1}).create("users/u2", {"b": 2})
        await batch.commit()

        assert (await store.get("users/u1")).exists
        assert (await store.get("users/u2")).exists

    @pytest.mark.asyncio
    async def test_failing_batch_writes_nothing(self, store):
        """Test that a failing write rolls back the whole batch."""
        await store.set("users/u2", {"b": 1})

        batch = store.batch()
        batch.set("users/u1", {"a": 1}).create("users/u2", {"b": 2})
        with pytest.raises(DocumentAlreadyExistsError):
            await batch.commit()

        assert (await store.get("users/u1")).exists is False
        assert (await store.get("users/u2")).data == {"b": 1}


class TestTransactions:
    """Tests for transactions."""

    @pytest.mark.asyncio
    async def test_writes_applied_after_function_returns(self, store):
        """Test that transaction writes are buffered until commit."""

        async def fn(transaction):
            transaction.set("users/u1", {"a": 1})
            assert (await store.get("users/u1")).exists is False
            return "done"

        assert await store.run_transaction(fn) == "done"
        assert (await store.get("users/u1")).data == {"a": 1}

    @pytest.mark.asyncio
    async def test_exception_aborts_without_writing(self, store):
        """Test that raising inside the function discards its writes."""

        async def fn(transaction):
            transaction.set("users/u1", {"a": 1})
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await store.run_transaction(fn)

        assert (await store.get("users/u1")).exists is False

    @pytest.mark.asyncio
    async def test_concurrent_read_modify_write_is_serialized(self, store):
        """Test that concurrent increments through transactions don't lose updates."""
        await store.set("users/u1/dailyProcessingCount/2026-03-14", {"count": 0})
        path = "users/u1/dailyProcessingCount/2026-03-14"

        async def increment(transaction):
            current = (await transaction.get(path)).get("count")
            await asyncio.sleep(0)
            transaction.set(path, {"count": current + 1})

        await asyncio.gather(*(store.run_transaction(increment) for _ in range(10)))

        assert (await store.get(path)).get("count") == 10
