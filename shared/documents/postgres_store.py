"""
PostgreSQL-backed document store.

Documents live in the ``documents`` table as JSONB. Transactions lock every
row they read with ``SELECT ... FOR UPDATE`` and retry on serialization
failures or deadlocks.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, not_, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.logging import get_logger
from shared.database.base import utc_now
from shared.database.connection import DatabaseConnection
from shared.database.models import DocumentRecord
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
    split_path,
)
from shared.exceptions import DocumentStoreError, FocusQueueError, TransactionConflictError
from shared.utils.datetime_utils import ensure_utc

logger = get_logger(__name__)

DATETIME_MARKER = "__datetime__"
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def encode_value(value: Any) -> Any:
    """Convert a document value into JSON-safe form."""
    if isinstance(value, datetime):
        return {DATETIME_MARKER: ensure_utc(value).isoformat()}
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [encode_value(item) for item in value]
    return value


def decode_value(value: Any) -> Any:
    """Reverse :func:`encode_value`."""
    if isinstance(value, dict):
        if set(value) == {DATETIME_MARKER}:
            return datetime.fromisoformat(value[DATETIME_MARKER])
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value


def build_query(
    collection: str,
    filters: list[Filter] | None = None,
    limit: int | None = None,
    order_by: OrderBy | None = None,
) -> Select:
    """
    Translate a collection query into a SELECT over the documents table.

    Args:
        collection: Collection path
        filters: Field predicates
        limit: Maximum rows
        order_by: Sort order

    Returns:
        SQLAlchemy select statement
    """
    stmt = select(DocumentRecord).where(DocumentRecord.collection == collection.strip("/"))

    for flt in filters or []:
        if flt.op == "==":
            stmt = stmt.where(DocumentRecord.data.contains({flt.field: encode_value(flt.value)}))
        elif flt.op == "!=":
            stmt = stmt.where(
                DocumentRecord.data.has_key(flt.field),
                not_(DocumentRecord.data.contains({flt.field: encode_value(flt.value)})),
            )
        elif flt.op == "in":
            stmt = stmt.where(
                or_(
                    *[
                        DocumentRecord.data.contains({flt.field: encode_value(item)})
                        for item in flt.value
                    ]
                )
            )
        else:
            raise DocumentStoreError(f"Unsupported filter operator: {flt.op}")

    if order_by is not None:
        column = DocumentRecord.data[order_by.field]
        stmt = stmt.order_by(column.desc() if order_by.descending else column.asc())
    else:
        stmt = stmt.order_by(DocumentRecord.path)

    if limit is not None:
        stmt = stmt.limit(limit)

    return stmt


def _to_snapshot(path: str, record: DocumentRecord | None) -> DocumentSnapshot:
    if record is None:
        return DocumentSnapshot(path=path, data=None)
    return DocumentSnapshot(path=path, data=decode_value(record.data))


async def _load(session: AsyncSession, path: str, for_update: bool) -> DocumentRecord | None:
    split_path(path)
    stmt = select(DocumentRecord).where(DocumentRecord.path == path)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _apply_writes(session: AsyncSession, writes: list[PendingWrite]) -> None:
    staged: dict[str, dict[str, Any] | None] = {}
    for write in writes:
        if write.path in staged:
            existing = staged[write.path]
        else:
            record = await _load(session, write.path, for_update=True)
            existing = decode_value(record.data) if record is not None else None
        staged[write.path] = apply_write(existing, write)

    for path, data in staged.items():
        if data is None:
            await session.execute(delete(DocumentRecord).where(DocumentRecord.path == path))
            continue

        collection, _ = split_path(path)
        encoded = encode_value(data)
        now = utc_now()
        stmt = insert(DocumentRecord).values(
            path=path,
            collection=collection,
            data=encoded,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentRecord.path],
            set_={"data": encoded, "updated_at": now},
        )
        await session.execute(stmt)


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


class PostgresTransaction(Transaction):
    """Transaction bound to one database session."""

    def __init__(self, session: AsyncSession):
        """
        Initialize transaction.

        Args:
            session: Session with an open database transaction
        """
        super().__init__()
        self._session = session

    async def get(self, path: str) -> DocumentSnapshot:
        """
        Read and lock a document.

        The path is also taken as a transaction-scoped advisory lock, so two
        transactions reading the same missing document still serialize.
        """
        await self._session.execute(select(func.pg_advisory_xact_lock(func.hashtext(path))))
        record = await _load(self._session, path, for_update=True)
        return _to_snapshot(path, record)

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """Query a collection and lock the matching rows."""
        stmt = build_query(collection, filters, limit, order_by).with_for_update()
        result = await self._session.execute(stmt)
        return [_to_snapshot(record.path, record) for record in result.scalars().all()]


class PostgresWriteBatch(WriteBatch):
    """Write batch committed in a single database transaction."""

    def __init__(self, store: "PostgresDocumentStore"):
        """Initialize batch."""
        super().__init__()
        self._store = store

    async def commit(self) -> None:
        """Apply every buffered write, or none of them."""
        await self._store.commit_writes(self.writes)


class PostgresDocumentStore(DocumentStore):
    """Document store persisted in PostgreSQL."""

    def __init__(self, connection: DatabaseConnection, max_attempts: int = 5):
        """
        Initialize store.

        Args:
            connection: Database connection
            max_attempts: Attempts per transaction before giving up
        """
        self.connection = connection
        self.max_attempts = max_attempts

    async def get(self, path: str) -> DocumentSnapshot:
        """Read a document."""
        try:
            async with self.connection.transaction() as session:
                record = await _load(session, path, for_update=False)
                return _to_snapshot(path, record)
        except DBAPIError as e:
            logger.error("document_get_failed", path=path, error=str(e))
            raise DocumentStoreError(f"Failed to read document {path}: {e}") from e

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        """Query the direct children of a collection."""
        try:
            async with self.connection.transaction() as session:
                result = await session.execute(build_query(collection, filters, limit, order_by))
                return [_to_snapshot(record.path, record) for record in result.scalars().all()]
        except DBAPIError as e:
            logger.error("document_query_failed", collection=collection, error=str(e))
            raise DocumentStoreError(f"Failed to query {collection}: {e}") from e

    async def commit_writes(self, writes: list[PendingWrite]) -> None:
        """Apply a list of writes atomically."""

        async def write_all(transaction: Transaction) -> None:
            transaction.extend(writes)

        await self.run_transaction(write_all)

    async def run_transaction(self, fn: TransactionFunction[T], max_attempts: int | None = None) -> T:
        """Run ``fn`` in a locking transaction, retrying on contention."""
        attempts = max_attempts or self.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                async with self.connection.transaction() as session:
                    transaction = PostgresTransaction(session)
                    result = await fn(transaction)
                    await _apply_writes(session, transaction.writes)
                return result
            except FocusQueueError:
                raise
            except DBAPIError as e:
                if _sqlstate(e) in RETRYABLE_SQLSTATES and attempt < attempts:
                    logger.warning("transaction_retry", attempt=attempt, error=str(e))
                    continue
                if _sqlstate(e) in RETRYABLE_SQLSTATES:
                    break
                logger.error("transaction_failed", attempt=attempt, error=str(e))
                raise DocumentStoreError(f"Transaction failed: {e}") from e

        raise TransactionConflictError(attempts=attempts)

    def batch(self) -> WriteBatch:
        """Start a new write batch."""
        return PostgresWriteBatch(self)

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self.connection.close()
