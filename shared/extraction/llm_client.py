"""
LLM client wrapper for action extraction.

Provides an async interface to the Claude API that returns the response
text together with token usage.
"""

from dataclasses import dataclass, field
from typing import Any

from anthropic import AnthropicError, AsyncAnthropic
from anthropic.types import Message

from shared.exceptions import ConfigurationError, LLMError, LLMResponseError
from shared.extraction.config import ExtractionSettings, get_extraction_settings


@dataclass
class TokenUsage:
    """Token counts for one completion."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Prompt plus completion tokens."""
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> dict[str, int]:
        """Usage in the logged shape."""
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class LLMCompletion:
    """Text response and usage."""

    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class LLMClient:
    """
    Wrapper around the Anthropic Claude API.

    Retries are delegated to the SDK; failures surface as ``LLMError``.
    """

    def __init__(self, settings: ExtractionSettings | None = None):
        """
        Initialize LLM client.

        Args:
            settings: Extraction settings (uses defaults if not provided)
        """
        self.settings = settings or get_extraction_settings()
        self._client: AsyncAnthropic | None = None

    @property
    def client(self) -> AsyncAnthropic:
        """
        Get or create Anthropic client instance.

        Returns:
            AsyncAnthropic client instance

        Raises:
            ConfigurationError: If API key is not configured
        """
        if self._client is None:
            if not self.settings.anthropic_api_key:
                raise ConfigurationError(
                    "Anthropic API key not configured",
                    key="EXTRACTION_ANTHROPIC_API_KEY",
                )

            self._client = AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                max_retries=self.settings.anthropic_max_retries,
                timeout=float(self.settings.anthropic_timeout),
            )
        return self._client

    async def complete(self, system_prompt: str, user_message: str) -> LLMCompletion:
        """
        Generate a completion.

        Args:
            system_prompt: System instructions
            user_message: User message

        Returns:
            LLMCompletion with text and usage

        Raises:
            LLMError: If the API request fails
            LLMResponseError: If the response has no text
        """
        try:
            response = await self.client.messages.create(
                model=self.settings.anthropic_model,
                max_tokens=self.settings.anthropic_max_tokens,
                temperature=self.settings.anthropic_temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
        except AnthropicError as e:
            raise LLMError(f"LLM API error: {e}") from e

        return LLMCompletion(
            text=self._extract_text_content(response),
            usage=self._extract_usage(response),
        )

    def _extract_text_content(self, response: Message) -> str:
        """
        Extract text content from a Claude message.

        Raises:
            LLMResponseError: If no text content found
        """
        for block in response.content:
            if block.type == "text" and block.text:
                return block.text

        raise LLMResponseError("No response from LLM")

    def _extract_usage(self, response: Message) -> TokenUsage:
        usage: Any = getattr(response, "usage", None)
        if usage is None:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
            completion_tokens=getattr(usage, "output_tokens", 0) or 0,
        )

    async def close(self) -> None:
        """Close the LLM client connection."""
        if self._client is not None:
            await self._client.close()
            self._client = None
