"""
Append-only log of LLM interactions.
"""

from typing import Any

from shared.config.logging import get_logger
from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths
from shared.utils.datetime_utils import Clock, get_utc_now

logger = get_logger(__name__)


class LLMInteractionLogger:
    """Writes one ``llmLogs`` document per model call."""

    def __init__(self, store: DocumentStore, clock: Clock = get_utc_now):
        self.store = store
        self._clock = clock

    async def log(
        self,
        user_id: str,
        thought_id: str,
        trigger: str,
        prompt: str,
        raw_response: str,
        actions: list[dict[str, Any]],
        tool_spec_ids: list[str],
        usage: dict[str, int] | None = None,
        error: str | None = None,
    ) -> str | None:
        """
        Record an interaction; failures are logged and swallowed.

        Returns:
            Log document id, or None if the write failed
        """
        try:
            return await self.store.add(
                DocumentPaths.llm_logs(user_id),
                {
                    "thoughtId": thought_id,
                    "trigger": trigger,
                    "prompt": prompt,
                    "rawResponse": raw_response,
                    "actions": actions,
                    "toolSpecIds": tool_spec_ids,
                    "usage": usage or None,
                    "error": error or None,
                    "createdAt": self._clock(),
                },
            )
        except Exception as e:
            logger.warning(
                "llm_interaction_log_failed",
                user_id=user_id,
                thought_id=thought_id,
                error=str(e),
            )
            return None
