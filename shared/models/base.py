"""
Base model for stored documents.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.documents.base import DocumentSnapshot


class DocumentModel(BaseModel):
    """
    Pydantic model mapped onto a camelCase document.

    Unknown fields are kept so a read-modify-write never drops data owned
    by other parts of the application.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        use_enum_values=True,
    )

    @classmethod
    def from_document(cls, data: dict[str, Any], **extra: Any) -> Self:
        """Validate raw document data."""
        return cls.model_validate({**data, **extra})

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot, **extra: Any) -> Self:
        """Validate a snapshot's data (the snapshot must exist)."""
        return cls.from_document(snapshot.to_dict(), **extra)

    def to_document(self, exclude: set[str] | None = None) -> dict[str, Any]:
        """Serialize to the stored camelCase shape."""
        return self.model_dump(by_alias=True, exclude=exclude)
