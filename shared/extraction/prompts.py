"""
Prompt templates for action extraction.

The system prompt describes the response contract; the user message
carries the handler reference, the user's context and the thought.
"""

import json
from typing import Any

NO_HANDLER_GUIDANCE = "(No additional tool guidance provided)"
NO_CONTEXT = "(No additional context available)"

# System prompt for action extraction
EXTRACTION_SYSTEM_PROMPT = """You are processing a user's thought in a personal productivity app.

Use the tool reference to understand how each tool should behave. Follow its guidance and never invent details that are not in the thought.

## Steps:

1. **Enhance the text**: fix grammar, spelling and capitalization, and complete partial references using the context. Preserve the user's voice. Do not add new information.
2. **Add tags**: tool tags from the tool reference, and entity tags (`project-{id}`, `goal-{id}`) only when the project or goal is explicitly mentioned. Use exact ids from the context.
3. **Suggest actions**: only when the thought explicitly asks for them ("create a task", "remind me to", ...).

## Confidence:

- 95-100: auto-apply (text enhancement, tool tags, entity tags)
- 70-94: suggestion for the user to approve
- below 70: do not include

## Output Format:

Respond with JSON only:

```json
{
  "actions": [
    {
      "type": "enhanceThought|addTag|createTask|linkToGoal|linkToProject|linkToPerson",
      "confidence": 0-100,
      "data": {},
      "reasoning": "Why this action applies"
    }
  ]
}
```
"""

EXAMPLE_RESPONSE: dict[str, Any] = {
    "actions": [
        {
            "type": "enhanceThought",
            "confidence": 99,
            "data": {
                "improvedText": "Had coffee with Sarah about the Website Redesign Project",
                "changes": [{"type": "completion", "from": "sar", "to": "Sarah"}],
            },
            "reasoning": "Completed the name and project reference from context",
        },
        {
            "type": "addTag",
            "confidence": 96,
            "data": {"tag": "project-abc123"},
            "reasoning": "References Website Redesign Project (ID: abc123)",
        },
    ]
}


def build_user_prompt(
    thought_text: str,
    context_text: str,
    tool_reference: str,
    thought_tags: list[str] | None = None,
) -> str:
    """
    Build the user message for one thought.

    Args:
        thought_text: Thought text to process
        context_text: Rendered user context
        tool_reference: Rendered handler specs
        thought_tags: Tags already on the thought

    Returns:
        User message text
    """
    prompt_parts = [
        "## Tool reference:\n",
        tool_reference or NO_HANDLER_GUIDANCE,
        "\n## Context:\n",
        context_text or NO_CONTEXT,
        "\n## Example response:\n",
        json.dumps(EXAMPLE_RESPONSE, indent=2),
        "\n## Thought to process:\n",
        f'"{thought_text}"',
    ]

    if thought_tags:
        prompt_parts.append(f"\nExisting tags: {', '.join(thought_tags)}")

    prompt_parts.append("\nRespond with JSON only.")

    return "\n".join(prompt_parts)


def render_prompt_for_log(system_prompt: str, user_message: str) -> str:
    """Combine the messages into one loggable prompt string."""
    return f"[SYSTEM]\n{system_prompt}\n\n[USER]\n{user_message}"
