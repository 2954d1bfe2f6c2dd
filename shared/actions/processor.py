"""
Action processor.

Routes LLM-proposed actions by confidence and turns the applied ones into
a partial thought update plus a history entry.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from shared.actions.config import ActionSettings, get_action_settings
from shared.actions.models import (
    ActionType,
    AIAction,
    AutoApply,
    ProcessedActions,
    Suggestion,
    ThoughtUpdate,
)
from shared.models.enums import AIProcessingStatus, ProcessingTrigger
from shared.models.thought import (
    PROCESSED_TAG,
    ActionLink,
    AppliedChanges,
    ProcessingHistoryEntry,
    Thought,
)
from shared.utils.datetime_utils import get_utc_now

logger = logging.getLogger(__name__)

DEPRECATED_PERSON_PREFIX = "person-"
ENTITY_TAG_PREFIXES = {"goal-": "goal", "project-": "project"}
LINKED_TO = "linked-to"

# Types that always wait for approval, whatever the confidence
SUGGESTION_ONLY_TYPES = {ActionType.LINK_TO_PERSON, ActionType.CREATE_TASK}


class _Collector:
    """Mutable accumulator used while routing actions."""

    def __init__(self, thought: Thought, now: datetime):
        self.thought = thought
        self.now = now
        self.auto_apply = AutoApply()
        self.suggestions: list[Suggestion] = []
        self.links: list[ActionLink] = []

    def suggest(self, action: AIAction) -> None:
        self.suggestions.append(
            Suggestion(
                id=uuid.uuid4().hex,
                type=action.type,
                confidence=action.confidence,
                data=action.data,
                reasoning=action.reasoning,
                created_at=self.now,
            )
        )

    def link(self, target_type: str, target_id: Any, confidence: float) -> None:
        if not isinstance(target_id, str) or not target_id.strip():
            return
        target_id = target_id.strip()
        for existing in self.links:
            if existing.target_type == target_type and existing.target_id == target_id:
                return
        self.links.append(
            ActionLink(
                target_type=target_type,
                target_id=target_id,
                relationship_type=LINKED_TO,
                confidence=confidence,
            )
        )

    def add_tag(self, action: AIAction) -> None:
        raw = action.data.get("tag")
        tag = raw.strip() if isinstance(raw, str) else ""
        if not tag:
            return

        if tag.startswith(DEPRECATED_PERSON_PREFIX):
            logger.debug(f"Skipping deprecated person tag {tag}")
            return

        for prefix, target_type in ENTITY_TAG_PREFIXES.items():
            if tag.startswith(prefix):
                self.link(target_type, tag[len(prefix) :], action.confidence)
                return

        if tag in self.thought.tags or tag in self.auto_apply.tags_to_add:
            return
        self.auto_apply.tags_to_add.append(tag)

    def enhance(self, action: AIAction) -> None:
        improved = action.data.get("improvedText")
        if not isinstance(improved, str) or not improved.strip():
            return
        if improved == self.thought.text:
            return
        self.auto_apply.text = improved
        changes = action.data.get("changes")
        self.auto_apply.text_changes = (
            [change for change in changes if isinstance(change, dict)]
            if isinstance(changes, list)
            else []
        )

    def apply(self, action: AIAction) -> None:
        if action.type == ActionType.ENHANCE_THOUGHT:
            self.enhance(action)
        elif action.type == ActionType.ADD_TAG:
            self.add_tag(action)
        elif action.type == ActionType.LINK_TO_GOAL:
            self.link("goal", action.data.get("goalId"), action.confidence)
        elif action.type == ActionType.LINK_TO_PROJECT:
            self.link("project", action.data.get("projectId"), action.confidence)
        else:
            logger.warning(f"Unknown high-confidence action type: {action.type}")


def _coerce_actions(actions: list[dict[str, Any]] | list[AIAction]) -> list[AIAction]:
    coerced = []
    for raw in actions:
        if isinstance(raw, AIAction):
            coerced.append(raw)
            continue
        try:
            coerced.append(AIAction.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Dropping malformed action {raw!r}: {e.error_count()} errors")
    return coerced


def process_actions(
    actions: list[dict[str, Any]] | list[AIAction],
    thought: Thought,
    settings: ActionSettings | None = None,
    now: datetime | None = None,
) -> ProcessedActions:
    """
    Route proposed actions by confidence.

    Actions at or above the auto-apply threshold are applied, actions at or
    above the suggestion threshold become suggestions and the rest are
    dropped. Person links and task creation are always suggestions.

    Args:
        actions: Proposed actions (raw dictionaries or parsed actions)
        thought: Thought the actions target
        settings: Confidence thresholds
        now: Timestamp for created suggestions

    Returns:
        ProcessedActions
    """
    settings = settings or get_action_settings()
    collector = _Collector(thought, now or get_utc_now())

    for action in _coerce_actions(actions):
        if action.confidence >= settings.auto_apply_threshold:
            if action.type in SUGGESTION_ONLY_TYPES:
                collector.suggest(action)
            else:
                collector.apply(action)
        elif action.confidence >= settings.suggest_threshold:
            collector.suggest(action)

    return ProcessedActions(
        auto_apply=collector.auto_apply,
        suggestions=collector.suggestions,
        links_to_create=collector.links,
    )


def count_changes(processed: ProcessedActions) -> int:
    """
    Count applied changes.

    Text counts once, then each added tag and each created link.
    """
    text_changes = 1 if processed.auto_apply.text else 0
    return text_changes + len(processed.auto_apply.tags_to_add) + len(processed.links_to_create)


def applied_by(trigger: str) -> str:
    """Label stored on applied changes for a trigger."""
    return "auto" if trigger == ProcessingTrigger.AUTO.value else "manual-trigger"


def build_thought_update(
    processed: ProcessedActions,
    thought: Thought,
    tokens_used: int,
    trigger: str,
    now: datetime | None = None,
) -> ThoughtUpdate:
    """
    Build the partial thought update for a completed run.

    The pre-processing snapshot (``originalText``/``originalTags``) is taken
    from the first run and carried forward unchanged afterwards.

    Args:
        processed: Routed actions
        thought: Thought as loaded at the start of the run
        tokens_used: Tokens consumed by the LLM call
        trigger: Trigger of the run
        now: Completion timestamp

    Returns:
        ThoughtUpdate with the partial update and the new history entry
    """
    now = now or get_utc_now()
    changes = count_changes(processed)
    auto_apply = processed.auto_apply

    tags = list(thought.tags)
    for tag in auto_apply.tags_to_add:
        if tag not in tags:
            tags.append(tag)
    if changes > 0 and PROCESSED_TAG not in tags:
        tags.append(PROCESSED_TAG)

    update: dict[str, Any] = {
        "tags": tags,
        "aiSuggestions": [suggestion.to_document() for suggestion in processed.suggestions],
        "aiProcessingStatus": AIProcessingStatus.COMPLETED.value,
        "aiError": None,
        "originalText": (
            thought.original_text if thought.original_text is not None else thought.text
        ),
        "originalTags": (
            thought.original_tags if thought.original_tags is not None else list(thought.tags)
        ),
    }

    if auto_apply.text and auto_apply.text != thought.text:
        update["text"] = auto_apply.text

    if changes > 0:
        update["aiAppliedChanges"] = AppliedChanges(
            text_enhanced=bool(auto_apply.text),
            text_changes=auto_apply.text_changes,
            tags_added=list(auto_apply.tags_to_add),
            links_created=len(processed.links_to_create),
            links=processed.links_to_create,
            applied_at=now,
            applied_by=applied_by(trigger),
        ).to_document()

    history_entry = ProcessingHistoryEntry(
        processed_at=now,
        trigger=trigger,
        status=AIProcessingStatus.COMPLETED.value,
        changes_applied=changes,
        suggestions_count=len(processed.suggestions),
        tokens_used=max(tokens_used, 0),
    )

    return ThoughtUpdate(update=update, history_entry=history_entry)
