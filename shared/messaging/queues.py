"""
Queue and exchange definitions.
"""

from dataclasses import dataclass, field
from typing import Any

PROCESSING_EXCHANGE = "focusqueue.processing"
EVENTS_EXCHANGE = "focusqueue.events"
DEAD_LETTER_EXCHANGE = "focusqueue.dlx"


@dataclass
class QueueConfig:
    """Queue configuration."""

    name: str
    durable: bool = True
    auto_delete: bool = False
    exchange: str | None = None
    routing_key: str | None = None
    dead_letter_exchange: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)

    def declare_arguments(self) -> dict[str, Any]:
        """Queue arguments passed to the broker on declaration."""
        arguments = dict(self.arguments)
        if self.dead_letter_exchange:
            arguments["x-dead-letter-exchange"] = self.dead_letter_exchange
        return arguments


class Queues:
    """Queue name constants and configurations."""

    # Job-created events, one per queued processing job
    PROCESSING_JOBS = QueueConfig(
        name="processing.jobs",
        exchange=PROCESSING_EXCHANGE,
        routing_key="job.created",
        dead_letter_exchange=DEAD_LETTER_EXCHANGE,
    )

    # Thought lifecycle events (auto trigger)
    THOUGHT_EVENTS = QueueConfig(
        name="thought.events",
        exchange=EVENTS_EXCHANGE,
        routing_key="thought.*",
        dead_letter_exchange=DEAD_LETTER_EXCHANGE,
    )

    # Dead letter queue
    DEAD_LETTER = QueueConfig(
        name="dead_letter",
        exchange=DEAD_LETTER_EXCHANGE,
        routing_key="#",
    )

    @classmethod
    def all_queues(cls) -> list[QueueConfig]:
        """
        Get all queue configurations.

        Returns:
            List of queue configurations
        """
        return [
            cls.PROCESSING_JOBS,
            cls.THOUGHT_EVENTS,
            cls.DEAD_LETTER,
        ]
