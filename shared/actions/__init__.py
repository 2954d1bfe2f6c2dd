"""
Processing of LLM-proposed actions.
"""

from shared.actions.config import ActionSettings, get_action_settings
from shared.actions.models import (
    ActionType,
    AIAction,
    AutoApply,
    ProcessedActions,
    Suggestion,
    ThoughtUpdate,
)
from shared.actions.processor import (
    applied_by,
    build_thought_update,
    count_changes,
    process_actions,
)

__all__ = [
    "ActionSettings",
    "get_action_settings",
    "ActionType",
    "AIAction",
    "AutoApply",
    "ProcessedActions",
    "Suggestion",
    "ThoughtUpdate",
    "process_actions",
    "build_thought_update",
    "count_changes",
    "applied_by",
]
