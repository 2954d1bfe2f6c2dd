"""
Handler trigger rules.

A rule maps something observable on a thought to a handler id. Rules are
plain frozen dataclasses evaluated over a :class:`TagSet`; the default
table is built from the registry's primary tags plus a few prefix
conventions for entity tags.
"""

from dataclasses import dataclass
from typing import Union

from shared.handlers.specs import HANDLER_SPECS, HandlerSpec


@dataclass(frozen=True)
class TagSet:
    """Normalized view of a thought's tags and declared source."""

    tags: frozenset[str]
    source: str | None = None

    @classmethod
    def build(cls, tags: list[str] | None, source: str | None = None) -> "TagSet":
        """
        Normalize raw tags.

        Args:
            tags: Raw tag strings (blank entries are dropped)
            source: Handler id that created the thought

        Returns:
            TagSet with trimmed, lowercased tags
        """
        normalized = frozenset(
            tag.strip().lower() for tag in tags or [] if isinstance(tag, str) and tag.strip()
        )
        cleaned_source = source.strip() if isinstance(source, str) and source.strip() else None
        return cls(tags=normalized, source=cleaned_source)

    def has(self, tag: str) -> bool:
        """Whether the exact tag is present."""
        return tag in self.tags

    def has_prefix(self, prefix: str) -> bool:
        """Whether any tag starts with the prefix (and has something after it)."""
        return any(tag.startswith(prefix) and len(tag) > len(prefix) for tag in self.tags)


@dataclass(frozen=True)
class ExactTag:
    """Fires when the thought carries ``tag``."""

    tag: str
    handler_id: str


@dataclass(frozen=True)
class TagPrefix:
    """Fires when any tag starts with ``prefix``."""

    prefix: str
    handler_id: str


@dataclass(frozen=True)
class SourceHandler:
    """Fires when the thought was created by a known handler."""


TriggerRule = Union[ExactTag, TagPrefix, SourceHandler]

ENTITY_PREFIX_RULES: tuple[TagPrefix, ...] = (
    TagPrefix("person-", "relationships"),
    TagPrefix("project-", "projects"),
    TagPrefix("goal-", "goals"),
)


def build_rule_table(specs: dict[str, HandlerSpec] | None = None) -> tuple[TriggerRule, ...]:
    """
    Build the ordered rule table.

    The source rule comes first, then one exact-tag rule per primary tag in
    registry order, then the entity prefix rules. The baseline ``processed``
    tag is not a trigger.

    Args:
        specs: Registry to derive rules from (defaults to the built-in one)

    Returns:
        Tuple of rules
    """
    registry = specs if specs is not None else HANDLER_SPECS
    rules: list[TriggerRule] = [SourceHandler()]
    for spec in registry.values():
        for tag in spec.primary_tags:
            if tag == "processed":
                continue
            rules.append(ExactTag(tag, spec.id))
    rules.extend(ENTITY_PREFIX_RULES)
    return tuple(rules)


DEFAULT_RULES = build_rule_table()


def evaluate_rule(rule: TriggerRule, tag_set: TagSet) -> str | None:
    """
    Evaluate one rule.

    Args:
        rule: Rule to evaluate
        tag_set: Normalized tags of the thought

    Returns:
        Handler id when the rule fires, else None
    """
    if isinstance(rule, ExactTag):
        return rule.handler_id if tag_set.has(rule.tag) else None
    if isinstance(rule, TagPrefix):
        return rule.handler_id if tag_set.has_prefix(rule.prefix) else None
    if isinstance(rule, SourceHandler):
        if tag_set.source and tag_set.source in HANDLER_SPECS:
            return tag_set.source
        return None
    raise TypeError(f"Unknown trigger rule: {rule!r}")
