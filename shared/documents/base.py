"""
Document store abstractions.

A document store holds JSON-like documents addressed by slash-separated
paths (``users/u1/thoughts/t1``). A document's collection is its path minus
the last segment. Stores offer single-document reads and writes, filtered
collection queries, buffered write batches, and transactions whose reads
are protected until the transaction's writes commit.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal, TypeVar

from shared.exceptions import DocumentAlreadyExistsError, InvalidArgumentError, NotFoundError

T = TypeVar("T")

FilterOp = Literal["==", "!=", "in"]
WriteKind = Literal["set", "create", "update", "delete"]


@dataclass(frozen=True)
class Filter:
    """Single field predicate applied to a collection query."""

    field: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class OrderBy:
    """Sort order for a collection query."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class Increment:
    """Field transform that adds ``amount`` to the stored numeric value."""

    amount: int | float = 1


@dataclass
class DocumentSnapshot:
    """Point-in-time view of a document."""

    path: str
    data: dict[str, Any] | None

    @property
    def exists(self) -> bool:
        """Whether the document existed when read."""
        return self.data is not None

    @property
    def id(self) -> str:
        """Last path segment."""
        return self.path.rsplit("/", 1)[-1]

    def get(self, key: str, default: Any = None) -> Any:
        """Read a top-level field, tolerating missing documents."""
        if self.data is None:
            return default
        return self.data.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the document data (empty dict when missing)."""
        return copy.deepcopy(self.data) if self.data is not None else {}


@dataclass
class PendingWrite:
    """Buffered write awaiting commit."""

    kind: WriteKind
    path: str
    data: dict[str, Any] = field(default_factory=dict)
    merge: bool = False


def split_path(path: str) -> tuple[str, str]:
    """
    Split a document path into collection path and document id.

    Args:
        path: Document path

    Returns:
        Tuple of (collection_path, document_id)

    Raises:
        InvalidArgumentError: If the path does not address a document
    """
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2 or len(segments) % 2 != 0:
        raise InvalidArgumentError(f"Invalid document path: {path}", field="path", value=path)
    return "/".join(segments[:-1]), segments[-1]


def generate_document_id() -> str:
    """Generate an id for a new document."""
    return uuid.uuid4().hex[:20]


def apply_write(existing: dict[str, Any] | None, write: PendingWrite) -> dict[str, Any] | None:
    """
    Compute the stored document that results from a write.

    Args:
        existing: Current document data (None if absent)
        write: Write to apply

    Returns:
        New document data, or None when the document is deleted

    Raises:
        DocumentAlreadyExistsError: If a create targets an existing document
        NotFoundError: If an update targets a missing document
    """
    if write.kind == "delete":
        return None

    if write.kind == "create" and existing is not None:
        raise DocumentAlreadyExistsError(write.path)

    if write.kind == "update" and existing is None:
        raise NotFoundError(f"No document to update: {write.path}", path=write.path)

    if write.kind == "update" or (write.kind == "set" and write.merge):
        base = copy.deepcopy(existing) if existing is not None else {}
    else:
        base = {}

    for key, value in write.data.items():
        if isinstance(value, Increment):
            current = base.get(key)
            if not isinstance(current, int | float) or isinstance(current, bool):
                current = 0
            base[key] = current + value.amount
        else:
            base[key] = copy.deepcopy(value)

    return base


def matches_filters(data: dict[str, Any], filters: list[Filter] | None) -> bool:
    """
    Evaluate query filters against a document.

    ``!=`` and ``in`` only match documents that carry the field.

    Args:
        data: Document data
        filters: Filters to apply

    Returns:
        True if every filter matches
    """
    for flt in filters or []:
        present = flt.field in data
        value = data.get(flt.field)
        if flt.op == "==":
            if not present or value != flt.value:
                return False
        elif flt.op == "!=":
            if not present or value == flt.value:
                return False
        elif flt.op == "in":
            if not present or value not in flt.value:
                return False
        else:
            raise InvalidArgumentError(f"Unsupported filter operator: {flt.op}", field="op")
    return True


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing values sort first, then by value
    if value is None:
        return (0, 0)
    return (1, value)


def sort_snapshots(
    snapshots: list[DocumentSnapshot], order_by: OrderBy | None
) -> list[DocumentSnapshot]:
    """Sort snapshots by a single field."""
    if order_by is None:
        return sorted(snapshots, key=lambda snap: snap.path)
    return sorted(
        snapshots,
        key=lambda snap: _sort_key(snap.get(order_by.field)),
        reverse=order_by.descending,
    )


class Transaction(ABC):
    """
    Read-then-write unit of work.

    Reads go to the store immediately. Writes are buffered and only applied
    when the transaction function returns normally; all reads must happen
    before the first write.
    """

    def __init__(self) -> None:
        """Initialize transaction."""
        self._writes: list[PendingWrite] = []

    @abstractmethod
    async def get(self, path: str) -> DocumentSnapshot:
        """Read a document inside the transaction."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """Query a collection inside the transaction."""
        pass

    def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Buffer a set (replace, or merge when ``merge`` is true)."""
        self._writes.append(PendingWrite("set", path, dict(data), merge))

    def create(self, path: str, data: dict[str, Any]) -> None:
        """Buffer a create that fails at commit if the document exists."""
        self._writes.append(PendingWrite("create", path, dict(data)))

    def update(self, path: str, data: dict[str, Any]) -> None:
        """Buffer a partial update that fails at commit if the document is missing."""
        self._writes.append(PendingWrite("update", path, dict(data)))

    def delete(self, path: str) -> None:
        """Buffer a delete."""
        self._writes.append(PendingWrite("delete", path))

    def extend(self, writes: list[PendingWrite]) -> None:
        """Buffer previously prepared writes."""
        self._writes.extend(writes)

    @property
    def writes(self) -> list[PendingWrite]:
        """Buffered writes in issue order."""
        return list(self._writes)


class WriteBatch(ABC):
    """Group of writes committed atomically."""

    def __init__(self) -> None:
        """Initialize batch."""
        self._writes: list[PendingWrite] = []

    def set(self, path: str, data: dict[str, Any], merge: bool = False) -> "WriteBatch":
        """Add a set to the batch."""
        self._writes.append(PendingWrite("set", path, dict(data), merge))
        return self

    def create(self, path: str, data: dict[str, Any]) -> "WriteBatch":
        """Add a create to the batch."""
        self._writes.append(PendingWrite("create", path, dict(data)))
        return self

    def update(self, path: str, data: dict[str, Any]) -> "WriteBatch":
        """Add a partial update to the batch."""
        self._writes.append(PendingWrite("update", path, dict(data)))
        return self

    def delete(self, path: str) -> "WriteBatch":
        """Add a delete to the batch."""
        self._writes.append(PendingWrite("delete", path))
        return self

    @property
    def writes(self) -> list[PendingWrite]:
        """Buffered writes in issue order."""
        return list(self._writes)

    @abstractmethod
    async def commit(self) -> None:
        """Apply every buffered write, or none of them."""
        pass


TransactionFunction = Callable[[Transaction], Awaitable[T]]


class DocumentStore(ABC):
    """Base class for document stores."""

    @abstractmethod
    async def get(self, path: str) -> DocumentSnapshot:
        """
        Read a document.

        Args:
            path: Document path

        Returns:
            Snapshot (``exists`` is False when the document is missing)
        """
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """
        Query the direct children of a collection.

        Args:
            collection: Collection path
            filters: Field predicates, all of which must match
            limit: Maximum number of documents returned
            order_by: Sort order (defaults to path order)

        Returns:
            Matching snapshots
        """
        pass

    @abstractmethod
    async def commit_writes(self, writes: list[PendingWrite]) -> None:
        """
        Apply a list of writes atomically.

        Args:
            writes: Writes to apply in order
        """
        pass

    @abstractmethod
    async def run_transaction(
        self, fn: "TransactionFunction[T]", max_attempts: int | None = None
    ) -> T:
        """
        Run ``fn`` inside a transaction and commit its buffered writes.

        ``fn`` may be invoked more than once when the store detects
        contention, so it must not have side effects outside the
        transaction. Any exception raised by ``fn`` aborts the transaction
        without writing and propagates to the caller.

        Args:
            fn: Async callable receiving the transaction
            max_attempts: Override for the number of commit attempts

        Returns:
            Whatever ``fn`` returned
        """
        pass

    @abstractmethod
    def batch(self) -> WriteBatch:
        """Start a new write batch."""
        pass

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Write a document, replacing it unless ``merge`` is true."""
        await self.commit_writes([PendingWrite("set", path, dict(data), merge)])

    async def create(self, path: str, data: dict[str, Any]) -> None:
        """Create a document, failing if it already exists."""
        await self.commit_writes([PendingWrite("create", path, dict(data))])

    async def update(self, path: str, data: dict[str, Any]) -> None:
        """Apply a partial update to an existing document."""
        await self.commit_writes([PendingWrite("update", path, dict(data))])

    async def delete(self, path: str) -> None:
        """Delete a document (no-op if missing)."""
        await self.commit_writes([PendingWrite("delete", path)])

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """
        Create a document with a generated id.

        Args:
            collection: Collection path
            data: Document data

        Returns:
            Generated document id
        """
        document_id = generate_document_id()
        await self.create(f"{collection}/{document_id}", data)
        return document_id

    async def close(self) -> None:
        """Release store resources."""
        return None
