"""
Action extraction for thought processing.

This module turns a thought, the user's context and the applicable handler
specs into proposed actions, including LLM integration and prompt templates.
"""

from shared.extraction.config import ExtractionSettings, get_extraction_settings
from shared.extraction.engine import (
    ActionExtractionEngine,
    ExtractionResult,
    extract_json_block,
    parse_actions,
)
from shared.extraction.llm_client import LLMClient, LLMCompletion, TokenUsage

__all__ = [
    "ExtractionSettings",
    "get_extraction_settings",
    "ActionExtractionEngine",
    "ExtractionResult",
    "extract_json_block",
    "parse_actions",
    "LLMClient",
    "LLMCompletion",
    "TokenUsage",
]
