"""
Database utilities and configuration.
"""

from shared.database.base import Base, TimestampMixin, utc_now
from shared.database.connection import DatabaseConfig, DatabaseConnection
from shared.database.models import DocumentRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "utc_now",
    "DatabaseConfig",
    "DatabaseConnection",
    "DocumentRecord",
]
