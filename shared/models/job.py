"""
Processing job document model.
"""

from datetime import datetime

from pydantic import Field

from shared.models.base import DocumentModel
from shared.models.enums import IN_FLIGHT_JOB_STATUSES, JobStatus


class Job(DocumentModel):
    """Queued unit of work for one thought."""

    id: str = Field(..., description="Job id")
    thought_id: str | None = Field(None, description="Thought to process")
    trigger: str = Field("manual", description="auto, manual or reprocess")
    status: str = Field(JobStatus.QUEUED.value, description="Job status")
    requested_at: datetime | None = Field(None, description="Enqueue time")
    requested_by: str | None = Field(None, description="Requesting user or system")
    started_at: datetime | None = Field(None, description="Dispatch time")
    completed_at: datetime | None = Field(None, description="Terminal transition time")
    tool_spec_ids: list[str] = Field(default_factory=list, description="Handlers to run")
    attempts: int = Field(0, ge=0, description="Dispatch attempts")
    error: str | None = Field(None, description="Failure message")

    @property
    def is_in_flight(self) -> bool:
        """Whether the job is queued or processing."""
        return self.status in IN_FLIGHT_JOB_STATUSES
