"""
Unit tests for the RabbitMQ client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from shared.exceptions import MessagingError
from shared.messaging.config import MessagingSettings
from shared.messaging.queues import Queues
from shared.messaging.rabbitmq_client import RabbitMQClient


@pytest.fixture
def channel():
    """Channel that declares mock exchanges and queues."""
    channel = MagicMock()
    channel.is_closed = False
    channel.set_qos = AsyncMock()
    channel.declare_exchange = AsyncMock(side_effect=lambda name, *args, **kwargs: MagicMock(name=name))
    channel.declare_queue = AsyncMock(side_effect=lambda name, **kwargs: MagicMock(bind=AsyncMock()))
    return channel


@pytest.fixture
def connection(channel):
    """Open connection yielding the channel."""
    connection = MagicMock()
    connection.is_closed = False
    connection.channel = AsyncMock(return_value=channel)
    connection.close = AsyncMock()
    return connection


class TestConnect:
    """Tests for connecting."""

    @pytest.mark.asyncio
    async def test_connect(self, connection, channel):
        """Test that a connection opens a channel with the prefetch count."""
        client = RabbitMQClient("amqp://test", prefetch_count=4)

        with patch("aio_pika.connect_robust", AsyncMock(return_value=connection)):
            await client.connect()

        channel.set_qos.assert_awaited_once_with(prefetch_count=4)
        assert client.get_channel() is channel
        assert await client.health_check()

    @pytest.mark.asyncio
    async def test_retries_then_fails(self):
        """Test that every attempt is made before giving up."""
        client = RabbitMQClient("amqp://test", connection_attempts=3, retry_delay=0)
        connect = AsyncMock(side_effect=ConnectionError("refused"))

        with patch("aio_pika.connect_robust", connect):
            with pytest.raises(MessagingError, match="refused"):
                await client.connect()

        assert connect.await_count == 3
        assert not await client.health_check()

    @pytest.mark.asyncio
    async def test_retry_succeeds(self, connection):
        """Test recovery on a later attempt."""
        client = RabbitMQClient("amqp://test", connection_attempts=2, retry_delay=0)
        connect = AsyncMock(side_effect=[ConnectionError("refused"), connection])

        with patch("aio_pika.connect_robust", connect):
            await client.connect()

        assert await client.health_check()

    def test_channel_requires_connection(self):
        """Test that the channel is unavailable before connecting."""
        with pytest.raises(MessagingError, match="Not connected"):
            RabbitMQClient("amqp://test").get_channel()

    def test_from_settings(self):
        """Test building from settings."""
        client = RabbitMQClient.from_settings(
            MessagingSettings(url="amqp://broker", prefetch_count=3)
        )
        assert client.url == "amqp://broker"
        assert client.prefetch_count == 3


class TestTopology:
    """Tests for exchange and queue declaration."""

    @pytest.mark.asyncio
    async def test_setup_topology(self, connection, channel):
        """Test that every queue is declared once and bound to its exchange."""
        client = RabbitMQClient("amqp://test")
        with patch("aio_pika.connect_robust", AsyncMock(return_value=connection)):
            await client.connect()

        await client.setup_topology()
        await client.setup_topology()

        declared = [call.args[0] for call in channel.declare_queue.await_args_list]
        assert declared == [config.name for config in Queues.all_queues()]
        exchanges = {call.args[0] for call in channel.declare_exchange.await_args_list}
        assert exchanges == {"focusqueue.processing", "focusqueue.events", "focusqueue.dlx"}
        assert channel.declare_exchange.await_count == 3

        jobs_kwargs = channel.declare_queue.await_args_list[0].kwargs
        assert jobs_kwargs["arguments"] == {"x-dead-letter-exchange": "focusqueue.dlx"}

    @pytest.mark.asyncio
    async def test_declaration_failure(self, connection, channel):
        """Test that broker errors surface as MessagingError."""
        channel.declare_queue.side_effect = RuntimeError("access refused")
        client = RabbitMQClient("amqp://test")
        with patch("aio_pika.connect_robust", AsyncMock(return_value=connection)):
            await client.connect()

        with pytest.raises(MessagingError, match="processing.jobs"):
            await client.declare_queue(Queues.PROCESSING_JOBS)

    @pytest.mark.asyncio
    async def test_disconnect(self, connection):
        """Test that disconnecting closes the connection and forgets topology."""
        client = RabbitMQClient("amqp://test")
        with patch("aio_pika.connect_robust", AsyncMock(return_value=connection)):
            await client.connect()

        await client.disconnect()
        await client.disconnect()

        connection.close.assert_awaited_once()
        assert not await client.health_check()
