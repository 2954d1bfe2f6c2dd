"""
Document factories, a controllable clock and a scripted LLM for FocusQueue tests.

Documents are seeded straight into an in-memory store in their stored
camelCase shape.
"""

import json
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from shared.documents.memory_store import InMemoryDocumentStore
from shared.documents.paths import DocumentPaths
from shared.entitlements.config import EntitlementSettings
from shared.extraction.config import ExtractionSettings
from shared.extraction.engine import ActionExtractionEngine
from shared.extraction.llm_client import LLMCompletion, TokenUsage
from shared.messaging.events import InMemoryJobEventPublisher
from shared.processing.factory import ProcessingComponents, build_processing_components
from shared.rate_limiter.config import RateLimiterSettings
from workers.thought_processing.config import WorkerSettings
from workers.thought_processing.worker import ProcessingQueueWorker

USER_ID = "user_123"
THOUGHT_ID = "thought_abc"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 14, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def seed_pro_user(store: InMemoryDocumentStore, user_id: str = USER_ID) -> None:
    """Registered user with an active pro subscription."""
    store._documents[DocumentPaths.user(user_id)] = {
        "isAnonymous": False,
        "providers": ["password"],
    }
    store._documents[DocumentPaths.subscription(user_id)] = {
        "tier": "pro",
        "status": "active",
        "entitlements": {},
    }


def seed_free_user(store: InMemoryDocumentStore, user_id: str = USER_ID) -> None:
    """Registered user on the free tier."""
    store._documents[DocumentPaths.user(user_id)] = {"providers": ["google.com"]}
    store._documents[DocumentPaths.subscription(user_id)] = {"tier": "free", "status": "active"}


def seed_enrollments(
    store: InMemoryDocumentStore, handler_ids: list[str], user_id: str = USER_ID
) -> None:
    """Active enrollments for the given handlers."""
    for handler_id in handler_ids:
        store._documents[DocumentPaths.tool_enrollment(user_id, handler_id)] = {
            "status": "active"
        }


def seed_thought(
    store: InMemoryDocumentStore,
    thought_id: str = THOUGHT_ID,
    user_id: str = USER_ID,
    **fields,
) -> str:
    """Thought document; ``fields`` are stored as given (camelCase)."""
    data = {"text": "Call mom about the weekend trip", "tags": []}
    data.update(fields)
    store._documents[DocumentPaths.thought(user_id, thought_id)] = data
    return thought_id


def seed_anonymous_user(
    store: InMemoryDocumentStore, user_id: str = USER_ID, **session_fields
) -> None:
    """Anonymous user with an anonymous session record."""
    store._documents[DocumentPaths.user(user_id)] = {"isAnonymous": True, "providers": []}
    store._documents[DocumentPaths.anonymous_session(user_id)] = dict(session_fields)


def action(type_: str, confidence: float, **data: Any) -> dict[str, Any]:
    """Action in the shape the model returns."""
    return {"type": type_, "confidence": confidence, "data": data, "reasoning": "test"}


class FakeLLMClient:
    """
    Replies with a fixed action list, or raises ``error``.

    ``on_call`` is awaited before replying, while the run is in progress.
    """

    def __init__(
        self,
        actions: list[dict[str, Any]] | None = None,
        text: str | None = None,
        error: Exception | None = None,
    ):
        self.actions = actions or []
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        self.on_call: Callable[[], Awaitable[None]] | None = None

    async def complete(self, system_prompt: str, user_message: str) -> LLMCompletion:
        self.calls.append((system_prompt, user_message))
        if self.on_call is not None:
            await self.on_call()
        if self.error is not None:
            raise self.error
        text = self.text if self.text is not None else json.dumps({"actions": self.actions})
        return LLMCompletion(text=text, usage=TokenUsage(prompt_tokens=90, completion_tokens=30))

    async def close(self) -> None:
        self.closed = True


def build_in_process_worker(
    store: InMemoryDocumentStore,
    llm_client: FakeLLMClient,
    clock: FakeClock,
    entitlement_settings: EntitlementSettings | None = None,
    rate_limiter_settings: RateLimiterSettings | None = None,
) -> tuple[ProcessingComponents, ProcessingQueueWorker, InMemoryJobEventPublisher]:
    """Wire components and a worker that runs every published event in-process."""
    publisher = InMemoryJobEventPublisher()
    components = build_processing_components(
        store,
        publisher,
        entitlement_settings=entitlement_settings,
        rate_limiter_settings=rate_limiter_settings,
        clock=clock,
    )
    engine = ActionExtractionEngine(
        settings=ExtractionSettings(anthropic_api_key="test-key"), llm_client=llm_client
    )
    worker = ProcessingQueueWorker.from_components(
        components,
        extraction_engine=engine,
        worker_settings=WorkerSettings(consume_thought_events=True),
        clock=clock,
    )
    publisher.dispatcher = worker.dispatch_event
    return components, worker, publisher
