"""
Capability handlers ("tools") and their resolution.
"""

from shared.handlers.enrollment import EnrollmentRepository
from shared.handlers.resolver import (
    filter_to_enrolled,
    resolve_handler_ids,
    resolve_handler_specs,
)
from shared.handlers.rules import (
    DEFAULT_RULES,
    ExactTag,
    SourceHandler,
    TagPrefix,
    TagSet,
    TriggerRule,
    build_rule_table,
)
from shared.handlers.specs import (
    BASELINE_HANDLER_ID,
    HANDLER_SPECS,
    HandlerSpec,
    get_handler_spec_by_id,
    render_handler_spec_for_prompt,
    render_handler_specs_for_prompt,
)

__all__ = [
    "HandlerSpec",
    "HANDLER_SPECS",
    "BASELINE_HANDLER_ID",
    "get_handler_spec_by_id",
    "render_handler_spec_for_prompt",
    "render_handler_specs_for_prompt",
    "TagSet",
    "TriggerRule",
    "ExactTag",
    "TagPrefix",
    "SourceHandler",
    "DEFAULT_RULES",
    "build_rule_table",
    "resolve_handler_ids",
    "resolve_handler_specs",
    "filter_to_enrolled",
    "EnrollmentRepository",
]
