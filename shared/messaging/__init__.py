"""
RabbitMQ messaging utilities and job events.
"""

from shared.messaging.config import MessagingSettings, get_messaging_settings
from shared.messaging.consumer import MessageConsumer
from shared.messaging.events import (
    JOB_CREATED,
    THOUGHT_CREATED,
    InMemoryJobEventPublisher,
    JobCreatedEvent,
    JobEventPublisher,
    RabbitMQJobEventPublisher,
    ThoughtCreatedEvent,
    parse_event,
)
from shared.messaging.publisher import MessagePublisher
from shared.messaging.queues import QueueConfig, Queues
from shared.messaging.rabbitmq_client import RabbitMQClient

__all__ = [
    "RabbitMQClient",
    "MessagePublisher",
    "MessageConsumer",
    "Queues",
    "QueueConfig",
    "MessagingSettings",
    "get_messaging_settings",
    "JOB_CREATED",
    "THOUGHT_CREATED",
    "JobCreatedEvent",
    "ThoughtCreatedEvent",
    "JobEventPublisher",
    "RabbitMQJobEventPublisher",
    "InMemoryJobEventPublisher",
    "parse_event",
]
