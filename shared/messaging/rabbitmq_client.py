"""
RabbitMQ connection and topology.

One robust connection with one channel per process. Exchanges and queues
are declared lazily and cached by name; ``setup_topology`` declares the
whole processing topology up front (jobs, thought events, dead letters).
"""

import asyncio

import aio_pika
from aio_pika import ExchangeType
from aio_pika.abc import (
    AbstractChannel,
    AbstractExchange,
    AbstractQueue,
    AbstractRobustConnection,
)

from shared.config.logging import get_logger
from shared.exceptions import MessagingError
from shared.messaging.config import MessagingSettings
from shared.messaging.queues import QueueConfig, Queues

logger = get_logger(__name__)


class RabbitMQClient:
    """Owns the broker connection and the declared topology."""

    def __init__(
        self,
        url: str,
        heartbeat: int = 60,
        connection_attempts: int = 3,
        retry_delay: float = 2.0,
        prefetch_count: int = 10,
    ):
        """
        Initialize RabbitMQ client.

        Args:
            url: AMQP URL
            heartbeat: Heartbeat interval in seconds
            connection_attempts: Connection attempts before giving up
            retry_delay: Seconds between attempts
            prefetch_count: Unacked deliveries allowed per consumer
        """
        self.url = url
        self.heartbeat = heartbeat
        self.connection_attempts = connection_attempts
        self.retry_delay = retry_delay
        self.prefetch_count = prefetch_count
        self._connection: AbstractRobustConnection | None = None
        self._channel: AbstractChannel | None = None
        self._exchanges: dict[str, AbstractExchange] = {}
        self._queues: dict[str, AbstractQueue] = {}

    @classmethod
    def from_settings(cls, settings: MessagingSettings) -> "RabbitMQClient":
        """Build a client from messaging settings."""
        return cls(
            url=settings.url,
            heartbeat=settings.heartbeat,
            connection_attempts=settings.connection_attempts,
            retry_delay=settings.retry_delay,
            prefetch_count=settings.prefetch_count,
        )

    async def connect(self) -> None:
        """
        Open the connection and channel.

        Raises:
            MessagingError: If every attempt fails
        """
        for attempt in range(1, self.connection_attempts + 1):
            try:
                self._connection = await aio_pika.connect_robust(
                    self.url, heartbeat=self.heartbeat
                )
                self._channel = await self._connection.channel()
                await self._channel.set_qos(prefetch_count=self.prefetch_count)
                logger.info("rabbitmq_connected", attempt=attempt)
                return
            except Exception as e:
                logger.warning("rabbitmq_connection_attempt_failed", attempt=attempt, error=str(e))
                if attempt == self.connection_attempts:
                    raise MessagingError(f"Failed to connect to RabbitMQ: {e}") from e
                await asyncio.sleep(self.retry_delay)

    async def disconnect(self) -> None:
        """Close the connection; declared topology is forgotten."""
        self._exchanges.clear()
        self._queues.clear()
        self._channel = None
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            await connection.close()
            logger.info("rabbitmq_disconnected")
        except Exception as e:
            logger.error("rabbitmq_disconnect_failed", error=str(e))

    def get_channel(self) -> AbstractChannel:
        """
        Get the open channel.

        Raises:
            MessagingError: If not connected
        """
        if self._channel is None:
            raise MessagingError("Not connected to RabbitMQ")
        return self._channel

    async def declare_exchange(self, name: str) -> AbstractExchange:
        """
        Declare a durable topic exchange, once per name.

        Raises:
            MessagingError: If declaration fails
        """
        if name in self._exchanges:
            return self._exchanges[name]

        channel = self.get_channel()
        try:
            exchange = await channel.declare_exchange(name, ExchangeType.TOPIC, durable=True)
        except Exception as e:
            raise MessagingError(f"Failed to declare exchange '{name}': {e}") from e

        self._exchanges[name] = exchange
        return exchange

    async def declare_queue(self, config: QueueConfig) -> AbstractQueue:
        """
        Declare a queue and bind it to its exchange.

        The dead-letter exchange named by the config is declared first.

        Raises:
            MessagingError: If declaration or binding fails
        """
        if config.name in self._queues:
            return self._queues[config.name]

        channel = self.get_channel()
        if config.dead_letter_exchange:
            await self.declare_exchange(config.dead_letter_exchange)

        try:
            queue = await channel.declare_queue(
                config.name,
                durable=config.durable,
                auto_delete=config.auto_delete,
                arguments=config.declare_arguments() or None,
            )
            if config.exchange and config.routing_key:
                exchange = await self.declare_exchange(config.exchange)
                await queue.bind(exchange, routing_key=config.routing_key)
        except MessagingError:
            raise
        except Exception as e:
            raise MessagingError(f"Failed to declare queue '{config.name}': {e}") from e

        self._queues[config.name] = queue
        logger.debug(
            "queue_declared",
            queue=config.name,
            exchange=config.exchange,
            routing_key=config.routing_key,
        )
        return queue

    async def setup_topology(self) -> None:
        """Declare every processing queue with its exchanges."""
        for config in Queues.all_queues():
            await self.declare_queue(config)
        logger.info("rabbitmq_topology_ready", queues=len(self._queues))

    async def health_check(self) -> bool:
        """True while both connection and channel are open."""
        return bool(
            self._connection is not None
            and not self._connection.is_closed
            and self._channel is not None
            and not self._channel.is_closed
        )
