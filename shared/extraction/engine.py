"""
Action extraction engine.

Builds the prompt for a thought, calls the LLM and parses the proposed
actions out of its response.
"""

import json
import re
from dataclasses import replace
from typing import Any

from shared.context.gatherer import format_context_for_prompt
from shared.context.models import ProcessingContext
from shared.exceptions import LLMResponseError
from shared.extraction.config import ExtractionSettings, get_extraction_settings
from shared.extraction.llm_client import LLMClient
from shared.extraction.prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    build_user_prompt,
    render_prompt_for_log,
)
from shared.handlers.specs import HandlerSpec, render_handler_specs_for_prompt

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class ExtractionResult:
    """Result of one extraction call."""

    def __init__(
        self,
        prompt: str,
        raw_response: str,
        actions: list[dict[str, Any]],
        usage: dict[str, int] | None = None,
    ):
        """
        Initialize extraction result.

        Args:
            prompt: Full prompt sent to the LLM
            raw_response: Raw LLM response text
            actions: Proposed actions
            usage: Token usage (prompt, completion and total tokens)
        """
        self.prompt = prompt
        self.raw_response = raw_response
        self.actions = actions
        self.usage = usage or {}

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed by the call."""
        return int(self.usage.get("total_tokens", 0) or 0)

    @property
    def action_count(self) -> int:
        """Number of proposed actions."""
        return len(self.actions)


def extract_json_block(raw: str) -> str | None:
    """
    Locate the JSON payload inside an LLM response.

    Prefers a fenced block, then a response that is itself JSON, then the
    outermost object, then the outermost array.

    Args:
        raw: Response text

    Returns:
        Candidate JSON text, or None if nothing looks like JSON
    """
    trimmed = raw.strip()
    if not trimmed:
        return None

    fence = CODE_FENCE_PATTERN.search(trimmed)
    if fence and fence.group(1).strip():
        return fence.group(1).strip()

    if trimmed.startswith(("{", "[")):
        return trimmed

    first_brace, last_brace = trimmed.find("{"), trimmed.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        return trimmed[first_brace : last_brace + 1].strip()

    first_bracket, last_bracket = trimmed.find("["), trimmed.rfind("]")
    if first_bracket != -1 and last_bracket > first_bracket:
        return trimmed[first_bracket : last_bracket + 1].strip()

    return None


def parse_actions(raw: str) -> list[dict[str, Any]]:
    """
    Parse proposed actions from a response.

    Args:
        raw: Response text

    Returns:
        Action dictionaries (non-dict entries are dropped)

    Raises:
        LLMResponseError: If no JSON can be parsed
    """
    candidate = extract_json_block(raw)
    if candidate is None:
        raise LLMResponseError("Invalid JSON response from LLM", raw_response=raw)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise LLMResponseError("Invalid JSON response from LLM", raw_response=raw) from e

    actions = parsed.get("actions") if isinstance(parsed, dict) else parsed
    if not isinstance(actions, list):
        return []
    return [action for action in actions if isinstance(action, dict)]


class ActionExtractionEngine:
    """Turns a thought plus context into proposed actions."""

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        llm_client: LLMClient | None = None,
    ):
        """
        Initialize extraction engine.

        Args:
            settings: Extraction settings (uses defaults if not provided)
            llm_client: LLM client instance (creates new if not provided)
        """
        self.settings = settings or get_extraction_settings()
        self.llm_client = llm_client or LLMClient(settings=self.settings)

    def build_messages(
        self,
        thought_text: str,
        context: ProcessingContext,
        specs: list[HandlerSpec],
        thought_tags: list[str] | None = None,
    ) -> tuple[str, str]:
        """
        Build the system prompt and user message.

        Returns:
            Tuple of (system prompt, user message)
        """
        if not self.settings.include_handler_examples:
            specs = [
                replace(spec, positive_examples=(), negative_examples=()) for spec in specs
            ]
        tool_reference = render_handler_specs_for_prompt(specs) if specs else ""
        user_message = build_user_prompt(
            thought_text=thought_text,
            context_text=format_context_for_prompt(context),
            tool_reference=tool_reference,
            thought_tags=thought_tags,
        )
        return EXTRACTION_SYSTEM_PROMPT, user_message

    async def extract_actions(
        self,
        thought_text: str,
        context: ProcessingContext,
        specs: list[HandlerSpec],
        thought_tags: list[str] | None = None,
    ) -> ExtractionResult:
        """
        Extract proposed actions for a thought.

        Args:
            thought_text: Thought text
            context: User context
            specs: Handler specs to offer the model
            thought_tags: Tags already on the thought

        Returns:
            ExtractionResult with prompt, raw response, actions and usage

        Raises:
            LLMError: If the LLM call fails
            LLMResponseError: If the response is empty or not JSON
        """
        system_prompt, user_message = self.build_messages(
            thought_text, context, specs, thought_tags
        )
        completion = await self.llm_client.complete(system_prompt, user_message)

        if not completion.text.strip():
            raise LLMResponseError("No response from LLM", raw_response=completion.text)

        return ExtractionResult(
            prompt=render_prompt_for_log(system_prompt, user_message),
            raw_response=completion.text,
            actions=parse_actions(completion.text),
            usage=completion.usage.to_dict(),
        )

    async def close(self) -> None:
        """Close LLM client connection."""
        if self.llm_client:
            await self.llm_client.close()
