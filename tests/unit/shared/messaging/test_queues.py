"""
Unit tests for queue configurations.
"""

from shared.messaging.queues import DEAD_LETTER_EXCHANGE, QueueConfig, Queues


class TestQueueConfig:
    """Tests for QueueConfig dataclass."""

    def test_queue_config_defaults(self):
        """Test default values for queue configuration."""
        config = QueueConfig(name="test.queue")

        assert config.name == "test.queue"
        assert config.durable is True
        assert config.auto_delete is False
        assert config.exchange is None
        assert config.routing_key is None
        assert config.declare_arguments() == {}

    def test_dead_letter_argument(self):
        """Test that a dead-letter exchange becomes a declaration argument."""
        config = QueueConfig(
            name="test.queue",
            dead_letter_exchange="test.dlx",
            arguments={"x-max-length": 100},
        )

        assert config.declare_arguments() == {
            "x-max-length": 100,
            "x-dead-letter-exchange": "test.dlx",
        }
        assert config.arguments == {"x-max-length": 100}


class TestQueues:
    """Tests for Queues class."""

    def test_processing_jobs_queue(self):
        """Test processing jobs queue configuration."""
        queue = Queues.PROCESSING_JOBS

        assert queue.name == "processing.jobs"
        assert queue.exchange == "focusqueue.processing"
        assert queue.routing_key == "job.created"
        assert queue.dead_letter_exchange == DEAD_LETTER_EXCHANGE
        assert queue.durable is True

    def test_thought_events_queue(self):
        """Test thought events queue configuration."""
        queue = Queues.THOUGHT_EVENTS

        assert queue.name == "thought.events"
        assert queue.exchange == "focusqueue.events"
        assert queue.routing_key == "thought.*"
        assert queue.dead_letter_exchange == DEAD_LETTER_EXCHANGE

    def test_dead_letter_queue(self):
        """Test dead letter queue configuration."""
        queue = Queues.DEAD_LETTER

        assert queue.name == "dead_letter"
        assert queue.exchange == "focusqueue.dlx"
        assert queue.routing_key == "#"
        assert queue.dead_letter_exchange is None

    def test_all_queues(self):
        """Test that all_queues returns all defined queues."""
        assert Queues.all_queues() == [
            Queues.PROCESSING_JOBS,
            Queues.THOUGHT_EVENTS,
            Queues.DEAD_LETTER,
        ]
