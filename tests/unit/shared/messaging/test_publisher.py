"""
Unit tests for the RabbitMQ message publisher.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from aio_pika import DeliveryMode

from shared.exceptions import MessagePublishError
from shared.messaging.publisher import MessagePublisher, build_message
from shared.messaging.queues import QueueConfig, Queues
from shared.messaging.rabbitmq_client import RabbitMQClient


@pytest.fixture
def exchange():
    """Exchange whose publish is recorded."""
    exchange = MagicMock()
    exchange.publish = AsyncMock()
    return exchange


@pytest.fixture
def client(exchange):
    """Client returning the recorded exchange."""
    client = MagicMock(spec=RabbitMQClient)
    client.declare_exchange = AsyncMock(return_value=exchange)
    return client


class TestBuildMessage:
    """Tests for message encoding."""

    def test_json_body_and_properties(self):
        """Test the body and AMQP properties of an encoded message."""
        message = build_message(
            {"job_id": "j1"}, message_type="job.created", correlation_id="j1"
        )

        assert json.loads(message.body) == {"job_id": "j1"}
        assert message.content_type == "application/json"
        assert message.delivery_mode == DeliveryMode.PERSISTENT
        assert message.type == "job.created"
        assert message.correlation_id == "j1"
        assert message.message_id

    def test_transient(self):
        """Test non-persistent delivery."""
        message = build_message({}, persistent=False)
        assert message.delivery_mode == DeliveryMode.NOT_PERSISTENT


class TestMessagePublisher:
    """Tests for MessagePublisher.publish."""

    @pytest.mark.asyncio
    async def test_publish_to_queue_exchange(self, client, exchange):
        """Test that the queue's exchange and binding key are used."""
        await MessagePublisher(client).publish(Queues.PROCESSING_JOBS, {"job_id": "j1"})

        client.declare_exchange.assert_awaited_once_with("focusqueue.processing")
        kwargs = exchange.publish.call_args.kwargs
        assert kwargs["routing_key"] == "job.created"

    @pytest.mark.asyncio
    async def test_routing_key_override(self, client, exchange):
        """Test an explicit routing key."""
        await MessagePublisher(client).publish(
            Queues.THOUGHT_EVENTS, {}, routing_key="thought.created"
        )

        assert exchange.publish.call_args.kwargs["routing_key"] == "thought.created"

    @pytest.mark.asyncio
    async def test_default_exchange(self, client, exchange):
        """Test that queues without an exchange route by queue name."""
        client.get_channel = MagicMock(return_value=MagicMock(default_exchange=exchange))

        await MessagePublisher(client).publish(QueueConfig(name="direct"), {})

        client.declare_exchange.assert_not_awaited()
        assert exchange.publish.call_args.kwargs["routing_key"] == "direct"

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, client, exchange):
        """Test that broker errors surface as MessagePublishError."""
        exchange.publish.side_effect = ConnectionError("closed")

        with pytest.raises(MessagePublishError, match="Failed to publish message: closed"):
            await MessagePublisher(client).publish(Queues.PROCESSING_JOBS, {})
