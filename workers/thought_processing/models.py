"""
Data models for the thought processing worker.
"""

from enum import Enum

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    """How a processing run ended without raising."""

    COMPLETED = "completed"


class RunResult(BaseModel):
    """Result of one thought processing run."""

    thought_id: str = Field(..., description="Processed thought")
    trigger: str = Field(..., description="Trigger of the run")
    status: RunStatus = Field(RunStatus.COMPLETED, description="Run outcome")
    handler_ids: list[str] = Field(default_factory=list, description="Handlers offered to the LLM")
    actions_proposed: int = Field(default=0, description="Actions returned by the LLM")
    changes_applied: int = Field(default=0, description="Changes applied to the thought")
    suggestions_count: int = Field(default=0, description="Suggestions stored")
    tokens_used: int = Field(default=0, description="LLM tokens consumed")


class JobOutcome(BaseModel):
    """Terminal state reached by a job."""

    job_id: str = Field(..., description="Job id")
    status: str = Field(..., description="Final job status")
    error: str | None = Field(None, description="Error recorded on the job")
    run: RunResult | None = Field(None, description="Run result when a run happened")
