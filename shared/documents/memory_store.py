"""
In-process document store.

Backs local development and the test suite. Transactions and write commits
are serialized with an ``asyncio.Lock``, so a transaction's reads cannot be
invalidated before its writes land.
"""

import asyncio
import copy
from typing import Any

from shared.config.logging import get_logger
from shared.documents.base import (
    DocumentSnapshot,
    DocumentStore,
    Filter,
    OrderBy,
    PendingWrite,
    T,
    Transaction,
    TransactionFunction,
    WriteBatch,
    apply_write,
    matches_filters,
    sort_snapshots,
    split_path,
)

logger = get_logger(__name__)


class InMemoryTransaction(Transaction):
    """Transaction over an :class:`InMemoryDocumentStore`."""

    def __init__(self, store: "InMemoryDocumentStore"):
        """
        Initialize transaction.

        Args:
            store: Owning store
        """
        super().__init__()
        self._store = store

    async def get(self, path: str) -> DocumentSnapshot:
        """Read a document inside the transaction."""
        return self._store._read(path)

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """Query a collection inside the transaction."""
        return self._store._select(collection, filters, limit, order_by)


class InMemoryWriteBatch(WriteBatch):
    """Write batch over an :class:`InMemoryDocumentStore`."""

    def __init__(self, store: "InMemoryDocumentStore"):
        """Initialize batch."""
        super().__init__()
        self._store = store

    async def commit(self) -> None:
        """Apply every buffered write, or none of them."""
        await self._store.commit_writes(self.writes)


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed document store."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        """
        Initialize store.

        Args:
            documents: Optional initial documents keyed by path
        """
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        for path, data in (documents or {}).items():
            split_path(path)
            self._documents[path] = copy.deepcopy(data)

    def _read(self, path: str) -> DocumentSnapshot:
        split_path(path)
        data = self._documents.get(path)
        return DocumentSnapshot(path=path, data=copy.deepcopy(data) if data is not None else None)

    def _select(
        self,
        collection: str,
        filters: list[Filter] | None,
        limit: int | None,
        order_by: OrderBy | None,
    ) -> list[DocumentSnapshot]:
        collection = collection.strip("/")
        matches = [
            DocumentSnapshot(path=path, data=copy.deepcopy(data))
            for path, data in self._documents.items()
            if split_path(path)[0] == collection and matches_filters(data, filters)
        ]
        matches = sort_snapshots(matches, order_by)
        if limit is not None:
            matches = matches[:limit]
        return matches

    def _apply(self, writes: list[PendingWrite]) -> None:
        # Stage against a scratch view so a failing write leaves nothing behind
        staged: dict[str, dict[str, Any] | None] = {}
        for write in writes:
            split_path(write.path)
            existing = (
                staged[write.path] if write.path in staged else self._documents.get(write.path)
            )
            staged[write.path] = apply_write(existing, write)

        for path, data in staged.items():
            if data is None:
                self._documents.pop(path, None)
            else:
                self._documents[path] = data

    async def get(self, path: str) -> DocumentSnapshot:
        """Read a document."""
        return self._read(path)

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """Query the direct children of a collection."""
        return self._select(collection, filters, limit, order_by)

    async def commit_writes(self, writes: list[PendingWrite]) -> None:
        """Apply a list of writes atomically."""
        async with self._lock:
            self._apply(writes)

    async def run_transaction(self, fn: TransactionFunction[T], max_attempts: int | None = None) -> T:
        """
        Run ``fn`` while holding the store lock and commit its writes.

        ``fn`` must only touch the store through the transaction it receives;
        calling the store's own write methods from inside it would deadlock.
        """
        async with self._lock:
            transaction = InMemoryTransaction(self)
            result = await fn(transaction)
            self._apply(transaction.writes)
            logger.debug("transaction_committed", writes=len(transaction.writes))
            return result

    def batch(self) -> WriteBatch:
        """Start a new write batch."""
        return InMemoryWriteBatch(self)

    def dump(self) -> dict[str, dict[str, Any]]:
        """Copy of every stored document keyed by path."""
        return copy.deepcopy(self._documents)
