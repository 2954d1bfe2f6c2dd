"""
Response schemas for the processing API.
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from shared.schemas.base import BaseSchema, SuccessResponse


class EnqueueResponse(SuccessResponse):
    """Result of a process-now or reprocess request."""

    job_id: str | None = Field(None, description="New or already in-flight job id")
    queued: bool = Field(..., description="Whether a new job was created")
    reverted: bool = Field(False, description="Whether a revert ran first")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": True,
                "message": "Thought queued for processing",
                "job_id": "6f1c2a9d0b7e4c3a8d21",
                "queued": True,
                "reverted": False,
            }
        },
    }


class RevertResponse(SuccessResponse):
    """Result of a revert request."""

    reverted_changes: dict[str, Any] | None = Field(None, description="Changes that were undone")


class JobResponse(BaseSchema):
    """Processing job as stored."""

    id: str = Field(..., description="Job id")
    thought_id: str | None = Field(None, description="Thought being processed")
    trigger: str = Field(..., description="auto, manual or reprocess")
    status: str = Field(..., description="Job status")
    requested_at: datetime | None = Field(None, description="Enqueue time")
    requested_by: str | None = Field(None, description="Requester")
    started_at: datetime | None = Field(None, description="Dispatch time")
    completed_at: datetime | None = Field(None, description="Terminal transition time")
    tool_spec_ids: list[str] = Field(default_factory=list, description="Handlers to run")
    attempts: int = Field(0, description="Dispatch attempts")
    error: str | None = Field(None, description="Failure message")
