"""
API schemas for the processing service.
"""

from services.processing.app.api.schemas.requests import (
    ProcessThoughtRequest,
    ReprocessThoughtRequest,
)
from services.processing.app.api.schemas.responses import (
    EnqueueResponse,
    JobResponse,
    RevertResponse,
)

__all__ = [
    "ProcessThoughtRequest",
    "ReprocessThoughtRequest",
    "EnqueueResponse",
    "RevertResponse",
    "JobResponse",
]
