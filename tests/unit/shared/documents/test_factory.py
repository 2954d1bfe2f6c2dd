"""
Unit tests for document store construction.
"""

import pytest

from shared.config.settings import Settings
from shared.documents.factory import create_document_store
from shared.documents.memory_store import InMemoryDocumentStore
from shared.documents.postgres_store import PostgresDocumentStore
from shared.exceptions import ConfigurationError


class TestCreateDocumentStore:
    """Tests for create_document_store."""

    def test_memory(self):
        """Test the in-memory backend."""
        store = create_document_store(Settings(document_store_backend="memory"))
        assert isinstance(store, InMemoryDocumentStore)

    def test_postgres(self):
        """Test the Postgres backend; no connection is opened until first use."""
        settings = Settings(
            document_store_backend="Postgres",
            database_url="postgresql+asyncpg://u:p@db:5432/focusqueue",
            transaction_max_attempts=7,
        )

        store = create_document_store(settings)

        assert isinstance(store, PostgresDocumentStore)
        assert store.max_attempts == 7
        assert store.connection.config.url == settings.database_url

    def test_unknown_backend(self):
        """Test that an unknown backend is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            create_document_store(Settings(document_store_backend="firestore"))

        assert exc_info.value.details == {"key": "document_store_backend"}
