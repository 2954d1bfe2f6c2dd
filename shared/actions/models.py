"""
Models for proposed and processed actions.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from shared.models.thought import ActionLink, ProcessingHistoryEntry


class ActionType:
    """Action types understood by the processor."""

    ENHANCE_THOUGHT = "enhanceThought"
    ADD_TAG = "addTag"
    LINK_TO_GOAL = "linkToGoal"
    LINK_TO_PROJECT = "linkToProject"
    LINK_TO_PERSON = "linkToPerson"
    CREATE_TASK = "createTask"


class AIAction(BaseModel):
    """Action proposed by the LLM."""

    type: str
    confidence: float = 0.0
    data: dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    relationship: str | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> Any:
        """Accept 0-1 or 0-100 confidences and store them as 0-1."""
        if value is None:
            return 0.0
        if isinstance(value, int | float) and value > 1:
            return min(float(value) / 100, 1.0)
        return value

    @field_validator("data", mode="before")
    @classmethod
    def default_data(cls, value: Any) -> Any:
        """Treat a missing or non-object payload as empty."""
        return value if isinstance(value, dict) else {}


class Suggestion(BaseModel):
    """Action waiting for user approval."""

    id: str
    type: str
    confidence: float
    data: dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    created_at: datetime
    status: str = "pending"

    def to_document(self) -> dict[str, Any]:
        """Stored camelCase shape."""
        return {
            "id": self.id,
            "type": self.type,
            "confidence": self.confidence,
            "data": self.data,
            "reasoning": self.reasoning,
            "createdAt": self.created_at,
            "status": self.status,
        }


class AutoApply(BaseModel):
    """Changes applied without user approval."""

    text: str | None = None
    text_changes: list[dict[str, Any]] = Field(default_factory=list)
    tags_to_add: list[str] = Field(default_factory=list)


class ProcessedActions(BaseModel):
    """Actions routed by confidence."""

    auto_apply: AutoApply = Field(default_factory=AutoApply)
    suggestions: list[Suggestion] = Field(default_factory=list)
    links_to_create: list[ActionLink] = Field(default_factory=list)


class ThoughtUpdate(BaseModel):
    """Partial thought update plus the history entry describing it."""

    update: dict[str, Any]
    history_entry: ProcessingHistoryEntry
