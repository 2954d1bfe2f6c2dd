"""
User context gathered for thought processing.
"""

from shared.context.config import ContextSettings, get_context_settings
from shared.context.gatherer import (
    ProcessingContextGatherer,
    format_context_for_prompt,
    short_name,
)
from shared.context.models import (
    ContextGoal,
    ContextMood,
    ContextPerson,
    ContextProject,
    ContextTask,
    ProcessingContext,
)

__all__ = [
    "ContextSettings",
    "get_context_settings",
    "ProcessingContextGatherer",
    "format_context_for_prompt",
    "short_name",
    "ProcessingContext",
    "ContextGoal",
    "ContextProject",
    "ContextPerson",
    "ContextTask",
    "ContextMood",
]
