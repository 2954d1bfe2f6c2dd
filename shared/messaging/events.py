"""
Job lifecycle events.

A ``job.created`` event is what wakes the queue worker for a new job; a
``thought.created`` event lets the worker run the auto trigger for a fresh
thought. Publishers are injected into the enqueuer so the transport can be
RabbitMQ in deployment and an in-process dispatcher in tests or
single-process setups.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from shared.config.logging import get_logger
from shared.messaging.publisher import MessagePublisher
from shared.messaging.queues import Queues
from shared.utils.datetime_utils import get_utc_now

logger = get_logger(__name__)

JOB_CREATED = "job.created"
THOUGHT_CREATED = "thought.created"


class JobCreatedEvent(BaseModel):
    """Published after a job document is committed."""

    event_type: Literal["job.created"] = JOB_CREATED
    user_id: str = Field(..., description="Job owner")
    job_id: str = Field(..., description="Job id")
    thought_id: str | None = Field(None, description="Thought the job processes")
    trigger: str | None = Field(None, description="Trigger of the job")
    occurred_at: datetime = Field(default_factory=get_utc_now)


class ThoughtCreatedEvent(BaseModel):
    """Published by the application when a user creates a thought."""

    event_type: Literal["thought.created"] = THOUGHT_CREATED
    user_id: str = Field(..., description="Thought owner")
    thought_id: str = Field(..., description="New thought id")
    occurred_at: datetime = Field(default_factory=get_utc_now)


JobEvent = JobCreatedEvent | ThoughtCreatedEvent
EventDispatcher = Callable[[JobEvent], Awaitable[Any]]


class JobEventPublisher(ABC):
    """Transport for job lifecycle events."""

    @abstractmethod
    async def publish_job_created(self, event: JobCreatedEvent) -> None:
        """Announce a newly queued job."""
        pass

    @abstractmethod
    async def publish_thought_created(self, event: ThoughtCreatedEvent) -> None:
        """Announce a newly created thought."""
        pass


class RabbitMQJobEventPublisher(JobEventPublisher):
    """Publishes events to the processing and events exchanges."""

    def __init__(self, publisher: MessagePublisher):
        """
        Initialize publisher.

        Args:
            publisher: Message publisher bound to a connected client
        """
        self.publisher = publisher

    async def publish_job_created(self, event: JobCreatedEvent) -> None:
        """Publish to the processing jobs queue."""
        await self.publisher.publish(
            Queues.PROCESSING_JOBS,
            event.model_dump(mode="json"),
            routing_key=JOB_CREATED,
            correlation_id=event.job_id,
            message_type=event.event_type,
        )
        logger.info("job_created_published", user_id=event.user_id, job_id=event.job_id)

    async def publish_thought_created(self, event: ThoughtCreatedEvent) -> None:
        """Publish to the thought events queue."""
        await self.publisher.publish(
            Queues.THOUGHT_EVENTS,
            event.model_dump(mode="json"),
            routing_key=THOUGHT_CREATED,
            correlation_id=event.thought_id,
            message_type=event.event_type,
        )


class InMemoryJobEventPublisher(JobEventPublisher):
    """
    Records events and optionally hands them to a dispatcher.

    With a dispatcher (usually the worker's event handler) the worker runs
    in the publishing process; dispatcher errors are logged, not raised, to
    match the broker's fire-and-forget semantics.
    """

    def __init__(self, dispatcher: EventDispatcher | None = None):
        """
        Initialize publisher.

        Args:
            dispatcher: Coroutine function invoked with every event
        """
        self.dispatcher = dispatcher
        self.events: list[JobEvent] = []

    async def _dispatch(self, event: JobEvent) -> None:
        self.events.append(event)
        if self.dispatcher is None:
            return
        try:
            await self.dispatcher(event)
        except Exception as e:
            logger.error(
                "in_process_dispatch_failed",
                event_type=event.event_type,
                error=str(e),
                exc_info=True,
            )

    async def publish_job_created(self, event: JobCreatedEvent) -> None:
        """Record and dispatch a job event."""
        await self._dispatch(event)

    async def publish_thought_created(self, event: ThoughtCreatedEvent) -> None:
        """Record and dispatch a thought event."""
        await self._dispatch(event)

    @property
    def job_events(self) -> list[JobCreatedEvent]:
        """Recorded job events in publish order."""
        return [event for event in self.events if isinstance(event, JobCreatedEvent)]


def parse_event(payload: dict[str, Any]) -> JobEvent | None:
    """
    Validate a message body into an event.

    Args:
        payload: Decoded message body

    Returns:
        The event, or None for an unknown ``event_type``
    """
    event_type = payload.get("event_type")
    if event_type == JOB_CREATED:
        return JobCreatedEvent.model_validate(payload)
    if event_type == THOUGHT_CREATED:
        return ThoughtCreatedEvent.model_validate(payload)
    return None
