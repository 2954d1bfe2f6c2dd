"""
Message publisher for RabbitMQ.

Events are published as persistent JSON messages to the exchange of the
target queue. Queues without an exchange receive messages through the
default exchange, keyed by queue name.
"""

import json
import uuid
from typing import Any

from aio_pika import DeliveryMode, Message
from aio_pika.abc import AbstractExchange

from shared.config.logging import get_logger
from shared.exceptions import MessagePublishError
from shared.messaging.queues import QueueConfig
from shared.messaging.rabbitmq_client import RabbitMQClient
from shared.utils.datetime_utils import get_utc_now

logger = get_logger(__name__)

CONTENT_TYPE = "application/json"


def build_message(
    payload: dict[str, Any],
    message_type: str | None = None,
    correlation_id: str | None = None,
    persistent: bool = True,
) -> Message:
    """
    Encode a payload as an AMQP message.

    Args:
        payload: JSON-serializable body; datetimes are rendered with ``str``
        message_type: AMQP ``type`` property, usually the event type
        correlation_id: Correlation ID carried on the message
        persistent: Whether the message survives a broker restart

    Returns:
        aio_pika Message with a fresh message id
    """
    return Message(
        body=json.dumps(payload, default=str).encode(),
        content_type=CONTENT_TYPE,
        delivery_mode=DeliveryMode.PERSISTENT if persistent else DeliveryMode.NOT_PERSISTENT,
        message_id=uuid.uuid4().hex,
        correlation_id=correlation_id,
        type=message_type,
        timestamp=get_utc_now(),
    )


class MessagePublisher:
    """Publishes JSON messages to the exchanges behind queue configs."""

    def __init__(self, client: RabbitMQClient):
        """
        Initialize message publisher.

        Args:
            client: Connected RabbitMQ client
        """
        self.client = client

    async def _exchange_for(self, queue_config: QueueConfig) -> AbstractExchange:
        if queue_config.exchange:
            return await self.client.declare_exchange(queue_config.exchange)
        return self.client.get_channel().default_exchange

    async def publish(
        self,
        queue_config: QueueConfig,
        message: dict[str, Any],
        routing_key: str | None = None,
        correlation_id: str | None = None,
        message_type: str | None = None,
        persistent: bool = True,
    ) -> None:
        """
        Publish a message towards a queue.

        Args:
            queue_config: Target queue
            message: Message payload
            routing_key: Routing key override (defaults to the queue's binding key)
            correlation_id: Correlation ID carried on the message
            message_type: AMQP ``type`` property
            persistent: Whether the message survives a broker restart

        Raises:
            MessagePublishError: If the exchange cannot be reached or the publish fails
        """
        if queue_config.exchange:
            key = routing_key or queue_config.routing_key or queue_config.name
        else:
            key = queue_config.name

        try:
            exchange = await self._exchange_for(queue_config)
            await exchange.publish(
                build_message(message, message_type, correlation_id, persistent),
                routing_key=key,
            )
        except Exception as e:
            logger.error(
                "message_publish_failed",
                queue=queue_config.name,
                routing_key=key,
                error=str(e),
            )
            raise MessagePublishError(
                queue=queue_config.name,
                message=f"Failed to publish message: {e}",
            ) from e

        logger.debug(
            "message_published",
            exchange=queue_config.exchange or "",
            routing_key=key,
            message_type=message_type,
            correlation_id=correlation_id,
        )
