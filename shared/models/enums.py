"""
Status and trigger enums shared by jobs and thoughts.
"""

from enum import Enum


class AIProcessingStatus(str, Enum):
    """Processing status shown on a thought."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    BLOCKED = "blocked"
    RATE_LIMITED = "rate_limited"


IN_FLIGHT_THOUGHT_STATUSES = {AIProcessingStatus.PENDING.value, AIProcessingStatus.PROCESSING.value}


class JobStatus(str, Enum):
    """Lifecycle state of a processing job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    RATE_LIMITED = "rate_limited"


IN_FLIGHT_JOB_STATUSES = [JobStatus.QUEUED.value, JobStatus.PROCESSING.value]


class ProcessingTrigger(str, Enum):
    """What caused a run or history entry."""

    AUTO = "auto"
    MANUAL = "manual"
    REPROCESS = "reprocess"
    REVERT = "revert"


class EnqueueStatus(str, Enum):
    """Outcome of an enqueue request."""

    QUEUED = "queued"
    ALREADY_QUEUED = "alreadyQueued"
