"""
Thought document models.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from shared.models.base import DocumentModel
from shared.models.enums import IN_FLIGHT_THOUGHT_STATUSES

PROCESSED_TAG = "processed"


class ProcessingHistoryEntry(DocumentModel):
    """Immutable record of one completed run or revert."""

    processed_at: datetime = Field(..., description="When the run or revert finished")
    trigger: str = Field(..., description="auto, manual, reprocess or revert")
    status: str = Field("completed", description="Outcome status")
    changes_applied: int = Field(0, ge=0, description="Number of changes applied")
    suggestions_count: int = Field(0, ge=0, description="Number of suggestions produced")
    tokens_used: int = Field(0, ge=0, description="LLM tokens consumed")
    reverted_changes: dict[str, Any] | None = Field(
        None, description="Applied-changes record undone by a revert"
    )

    @field_validator("changes_applied", "suggestions_count", "tokens_used", mode="before")
    @classmethod
    def default_zero(cls, value: Any) -> Any:
        """Treat a null count as zero."""
        return value if value is not None else 0


class ActionLink(DocumentModel):
    """Link from a thought to a goal or project."""

    target_type: str = Field(..., description="goal or project")
    target_id: str = Field(..., description="Linked entity id")
    relationship_type: str = Field("linked-to", description="Kind of link")
    confidence: float | None = Field(None, description="Confidence of the source action")


class AppliedChanges(DocumentModel):
    """Diff of one automated mutation, kept for revert."""

    text_enhanced: bool = Field(False, description="Whether the text was rewritten")
    text_changes: list[dict[str, Any]] = Field(default_factory=list, description="Text edits")
    tags_added: list[str] = Field(default_factory=list, description="Tags added")
    links_created: int = Field(0, ge=0, description="Number of links created")
    links: list[ActionLink] = Field(default_factory=list, description="Links created")
    applied_at: datetime = Field(..., description="When the changes were applied")
    applied_by: str = Field(..., description="auto or manual-trigger")


class Thought(DocumentModel):
    """User-authored note as seen by the processing queue."""

    id: str = Field(..., description="Thought id")
    user_id: str | None = Field(None, description="Owner id")
    text: str = Field("", description="Free text")
    tags: list[str] = Field(default_factory=list, description="Tags")
    source: str | None = Field(None, description="Handler id that created the thought")
    ai_processing_status: str | None = Field(None, description="Processing status")
    ai_error: str | None = Field(None, description="Last processing error")
    ai_applied_changes: dict[str, Any] | None = Field(
        None, description="Diff of the last automated mutation"
    )
    ai_suggestions: list[dict[str, Any]] = Field(
        default_factory=list, description="Pending suggestions"
    )
    original_text: str | None = Field(None, description="Text before the first AI mutation")
    original_tags: list[str] | None = Field(None, description="Tags before the first AI mutation")
    reprocess_count: int = Field(0, ge=0, description="Completed reprocess runs")
    processing_history: list[ProcessingHistoryEntry] = Field(
        default_factory=list, description="Append-only run history"
    )

    @field_validator("tags", "ai_suggestions", "processing_history", mode="before")
    @classmethod
    def default_empty_list(cls, value: Any) -> Any:
        """Treat a null list field as empty."""
        return value if value is not None else []

    @field_validator("reprocess_count", mode="before")
    @classmethod
    def default_zero(cls, value: Any) -> Any:
        """Treat a null counter as zero."""
        return value if value is not None else 0

    @property
    def is_processed(self) -> bool:
        """Whether the thought carries the processed tag."""
        return PROCESSED_TAG in self.tags

    @property
    def is_in_flight(self) -> bool:
        """Whether the status says a job is pending or running."""
        return self.ai_processing_status in IN_FLIGHT_THOUGHT_STATUSES

    def history_documents(self) -> list[dict[str, Any]]:
        """Stored form of the existing history entries."""
        return [entry.to_document() for entry in self.processing_history]
