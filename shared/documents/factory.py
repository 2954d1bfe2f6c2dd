"""
Document store construction from settings.
"""

from shared.config.logging import get_logger
from shared.config.settings import Settings, get_settings
from shared.database.connection import DatabaseConfig, DatabaseConnection
from shared.documents.base import DocumentStore
from shared.documents.memory_store import InMemoryDocumentStore
from shared.documents.postgres_store import PostgresDocumentStore
from shared.exceptions import ConfigurationError

logger = get_logger(__name__)


def create_document_store(settings: Settings | None = None) -> DocumentStore:
    """
    Build the document store selected by ``document_store_backend``.

    Args:
        settings: Application settings (uses cached settings if not provided)

    Returns:
        Document store instance

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    settings = settings or get_settings()
    backend = settings.document_store_backend.lower()

    if backend == "memory":
        logger.warning("document_store_in_memory", environment=settings.environment)
        return InMemoryDocumentStore()

    if backend == "postgres":
        connection = DatabaseConnection(DatabaseConfig.from_settings(settings))
        return PostgresDocumentStore(connection, max_attempts=settings.transaction_max_attempts)

    raise ConfigurationError(
        f"Unknown document store backend: {settings.document_store_backend}",
        key="document_store_backend",
    )
