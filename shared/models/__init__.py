"""
Document models.
"""

from shared.models.base import DocumentModel
from shared.models.enums import (
    IN_FLIGHT_JOB_STATUSES,
    IN_FLIGHT_THOUGHT_STATUSES,
    AIProcessingStatus,
    EnqueueStatus,
    JobStatus,
    ProcessingTrigger,
)
from shared.models.job import Job
from shared.models.subscription import AnonymousSession, Entitlements, SubscriptionSnapshot
from shared.models.thought import (
    PROCESSED_TAG,
    ActionLink,
    AppliedChanges,
    ProcessingHistoryEntry,
    Thought,
)

__all__ = [
    "DocumentModel",
    # Enums
    "AIProcessingStatus",
    "JobStatus",
    "ProcessingTrigger",
    "EnqueueStatus",
    "IN_FLIGHT_JOB_STATUSES",
    "IN_FLIGHT_THOUGHT_STATUSES",
    # Documents
    "Thought",
    "ProcessingHistoryEntry",
    "PROCESSED_TAG",
    "AppliedChanges",
    "ActionLink",
    "Job",
    "SubscriptionSnapshot",
    "Entitlements",
    "AnonymousSession",
]
