"""
Processing queue core: enqueue, revert and trigger entry points.
"""

from shared.processing.enqueuer import EnqueueResult, JobEnqueuer
from shared.processing.factory import ProcessingComponents, build_processing_components
from shared.processing.interaction_log import LLMInteractionLogger
from shared.processing.revert import RevertService, build_revert_update
from shared.processing.triggers import ProcessingTriggers, TriggerResponse

__all__ = [
    "JobEnqueuer",
    "EnqueueResult",
    "RevertService",
    "build_revert_update",
    "LLMInteractionLogger",
    "ProcessingTriggers",
    "TriggerResponse",
    "ProcessingComponents",
    "build_processing_components",
]
