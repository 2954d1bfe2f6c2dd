"""
Document store abstraction and backends.
"""

from shared.documents.base import (
    DocumentSnapshot,
    DocumentStore,
    Filter,
    Increment,
    OrderBy,
    Transaction,
    WriteBatch,
)
from shared.documents.factory import create_document_store
from shared.documents.memory_store import InMemoryDocumentStore
from shared.documents.paths import DocumentPaths
from shared.documents.postgres_store import PostgresDocumentStore

__all__ = [
    "DocumentStore",
    "DocumentSnapshot",
    "Filter",
    "OrderBy",
    "Increment",
    "Transaction",
    "WriteBatch",
    "DocumentPaths",
    "InMemoryDocumentStore",
    "PostgresDocumentStore",
    "create_document_store",
]
