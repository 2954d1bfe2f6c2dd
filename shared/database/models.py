"""
ORM model for stored documents.
"""

from typing import Any

from sqlalchemy import Index, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.base import Base, TimestampMixin


class DocumentRecord(Base, TimestampMixin):
    """One document, keyed by its full path."""

    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(Text, primary_key=True)
    collection: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_documents_collection", "collection"),
        Index("idx_documents_data", "data", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return f"<DocumentRecord(path={self.path})>"
