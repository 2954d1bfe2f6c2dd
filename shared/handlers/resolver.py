"""
Resolve which handlers apply to a thought.
"""

from collections.abc import Iterable

from shared.handlers.rules import DEFAULT_RULES, TagSet, TriggerRule, evaluate_rule
from shared.handlers.specs import BASELINE_HANDLER_ID, HandlerSpec, get_handler_spec_by_id
from shared.models.thought import Thought


def _dedupe(handler_ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for handler_id in handler_ids:
        if handler_id and handler_id not in seen:
            seen.add(handler_id)
            ordered.append(handler_id)
    return ordered


def resolve_handler_ids(
    thought: Thought,
    enrolled_ids: Iterable[str] | None = None,
    rules: tuple[TriggerRule, ...] = DEFAULT_RULES,
) -> list[str]:
    """
    Resolve handler ids for a thought.

    The baseline handler always comes first, followed by handlers fired by
    the rule table in rule order.

    Args:
        thought: Thought to inspect
        enrolled_ids: When given, only these handler ids are kept
        rules: Rule table to evaluate

    Returns:
        Ordered, deduplicated handler ids
    """
    tag_set = TagSet.build(thought.tags, thought.source)
    candidates = [BASELINE_HANDLER_ID]
    for rule in rules:
        handler_id = evaluate_rule(rule, tag_set)
        if handler_id:
            candidates.append(handler_id)

    resolved = _dedupe(candidates)
    if enrolled_ids is None:
        return resolved
    return filter_to_enrolled(resolved, enrolled_ids)


def filter_to_enrolled(handler_ids: Iterable[str], enrolled_ids: Iterable[str]) -> list[str]:
    """Keep handler ids present in the enrollment, preserving order."""
    enrolled = set(enrolled_ids)
    return [handler_id for handler_id in _dedupe(handler_ids) if handler_id in enrolled]


def resolve_handler_specs(handler_ids: Iterable[str]) -> list[HandlerSpec]:
    """
    Look up specs for handler ids, deduplicated by id.

    Raises:
        HandlerSpecNotFoundError: If an id is not registered
    """
    return [get_handler_spec_by_id(handler_id) for handler_id in _dedupe(handler_ids)]
