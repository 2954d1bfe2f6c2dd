"""
Message consumer for RabbitMQ.

Each delivery is handled once: the message is acknowledged after the
handler returns and rejected without requeue when it cannot be decoded or
the handler raises. Rejected messages go to the dead-letter queue.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

from aio_pika.abc import AbstractIncomingMessage

from shared.config.logging import get_logger
from shared.exceptions import MessageConsumeError
from shared.messaging.queues import QueueConfig
from shared.messaging.rabbitmq_client import RabbitMQClient

logger = get_logger(__name__)

MessageHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class MessageConsumer:
    """Message consumer for RabbitMQ queues."""

    def __init__(self, client: RabbitMQClient):
        """
        Initialize message consumer.

        Args:
            client: RabbitMQ client instance
        """
        self.client = client
        self._consumers: dict[str, str] = {}
        self._running = False

    def _build_callback(
        self, queue_config: QueueConfig, handler: MessageHandler
    ) -> Callable[[AbstractIncomingMessage], Awaitable[None]]:
        async def process_message(message: AbstractIncomingMessage) -> None:
            try:
                body = json.loads(message.body.decode())
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.error("message_decode_failed", queue=queue_config.name, error=str(e))
                await message.reject(requeue=False)
                return

            logger.debug(
                "message_received",
                queue=queue_config.name,
                routing_key=message.routing_key,
                correlation_id=message.correlation_id,
            )

            try:
                await handler(body)
            except Exception as e:
                logger.error(
                    "message_processing_failed",
                    queue=queue_config.name,
                    error=str(e),
                    exc_info=True,
                )
                await message.reject(requeue=False)
                return

            await message.ack()
            logger.debug(
                "message_processed",
                queue=queue_config.name,
                correlation_id=message.correlation_id,
            )

        return process_message

    async def consume(self, queue_config: QueueConfig, handler: MessageHandler) -> None:
        """
        Start consuming messages from a queue.

        Args:
            queue_config: Queue configuration
            handler: Async message handler function

        Raises:
            MessageConsumeError: If consumption fails
        """
        try:
            queue = await self.client.declare_queue(queue_config)
            consumer_tag = await queue.consume(self._build_callback(queue_config, handler))
            self._consumers[queue_config.name] = consumer_tag

            logger.info("consumer_started", queue=queue_config.name)

        except Exception as e:
            logger.error("consumer_start_failed", queue=queue_config.name, error=str(e))
            raise MessageConsumeError(
                queue=queue_config.name,
                message=f"Failed to start consumer: {e}",
            ) from e

    async def stop_consuming(self, queue_name: str) -> None:
        """
        Stop consuming from a specific queue.

        Args:
            queue_name: Queue name
        """
        consumer_tag = self._consumers.pop(queue_name, None)
        if consumer_tag is None:
            return

        try:
            queue = await self.client.get_channel().get_queue(queue_name, ensure=False)
            await queue.cancel(consumer_tag)
            logger.info("consumer_stopped", queue=queue_name)
        except Exception as e:
            logger.error("consumer_stop_failed", queue=queue_name, error=str(e))

    async def stop_all(self) -> None:
        """Stop all consumers."""
        for queue_name in list(self._consumers.keys()):
            await self.stop_consuming(queue_name)

        logger.info("all_consumers_stopped")

    async def run(self, bindings: list[tuple[QueueConfig, MessageHandler]]) -> None:
        """
        Consume from several queues until :meth:`stop` is called.

        Args:
            bindings: (queue, handler) pairs to consume
        """
        self._running = True
        try:
            for queue_config, handler in bindings:
                await self.consume(queue_config, handler)

            logger.info("consumer_running", queues=[config.name for config, _ in bindings])

            while self._running:
                await asyncio.sleep(1)

        finally:
            await self.stop_all()

    def stop(self) -> None:
        """Stop the consumer gracefully."""
        self._running = False
        logger.info("consumer_stop_requested")
