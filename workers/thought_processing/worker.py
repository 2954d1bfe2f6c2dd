"""
Thought processing worker.

Consumes job and thought events from RabbitMQ and drives each job through
the processing state machine. The same worker can also run inside another
process (the API service with messaging disabled) by receiving events from
an in-memory publisher.
"""

import asyncio
import logging
from typing import Any

from prometheus_client import start_http_server

from shared.cache import create_snapshot_cache
from shared.config.logging import job_log_context, setup_logging
from shared.config.settings import get_settings
from shared.context.gatherer import ProcessingContextGatherer
from shared.documents.factory import create_document_store
from shared.extraction.engine import ActionExtractionEngine
from shared.messaging import MessageConsumer, MessagePublisher, RabbitMQClient
from shared.messaging.config import MessagingSettings, get_messaging_settings
from shared.messaging.events import (
    JobCreatedEvent,
    JobEvent,
    RabbitMQJobEventPublisher,
    ThoughtCreatedEvent,
    parse_event,
)
from shared.messaging.queues import Queues
from shared.processing.factory import ProcessingComponents, build_processing_components
from shared.processing.interaction_log import LLMInteractionLogger
from shared.utils.datetime_utils import Clock, get_utc_now
from workers.thought_processing.config import WorkerSettings, get_worker_settings
from workers.thought_processing.models import JobOutcome
from workers.thought_processing.processor import JobProcessor, ThoughtProcessingRunner

logger = logging.getLogger(__name__)


class ProcessingQueueWorker:
    """
    Worker for processing queue events.

    Every event is handled exactly once per delivery; failures are recorded
    on the job and thought and never raised back to the transport.
    """

    def __init__(
        self,
        components: ProcessingComponents,
        job_processor: JobProcessor,
        extraction_engine: ActionExtractionEngine | None = None,
        worker_settings: WorkerSettings | None = None,
        rabbitmq_client: RabbitMQClient | None = None,
    ):
        """
        Initialize worker.

        Args:
            components: Shared processing collaborators
            job_processor: Job state machine
            extraction_engine: Extraction engine to close on shutdown
            worker_settings: Worker configuration
            rabbitmq_client: Broker client (None when running in-process)
        """
        self.components = components
        self.job_processor = job_processor
        self.extraction_engine = extraction_engine
        self.worker_settings = worker_settings or get_worker_settings()
        self.rabbitmq_client = rabbitmq_client
        self.consumer = MessageConsumer(client=rabbitmq_client) if rabbitmq_client else None
        self._tasks: set[asyncio.Task] = set()
        self._is_running = False

    @classmethod
    def from_components(
        cls,
        components: ProcessingComponents,
        extraction_engine: ActionExtractionEngine | None = None,
        context_gatherer: ProcessingContextGatherer | None = None,
        worker_settings: WorkerSettings | None = None,
        rabbitmq_client: RabbitMQClient | None = None,
        clock: Clock = get_utc_now,
    ) -> "ProcessingQueueWorker":
        """
        Build a worker around existing processing components.

        Args:
            components: Shared processing collaborators
            extraction_engine: LLM extraction (built from settings if not provided)
            context_gatherer: Context source (reads the store if not provided)
            worker_settings: Worker configuration
            rabbitmq_client: Broker client
            clock: Source of the current time

        Returns:
            ProcessingQueueWorker
        """
        store = components.store
        extraction_engine = extraction_engine or ActionExtractionEngine()
        runner = ThoughtProcessingRunner(
            store=store,
            context_gatherer=context_gatherer or ProcessingContextGatherer(store),
            extraction_engine=extraction_engine,
            interaction_logger=LLMInteractionLogger(store, clock=clock),
            clock=clock,
        )
        job_processor = JobProcessor(
            store=store,
            gate=components.gate,
            rate_limiter=components.rate_limiter,
            runner=runner,
            clock=clock,
        )
        return cls(
            components=components,
            job_processor=job_processor,
            extraction_engine=extraction_engine,
            worker_settings=worker_settings,
            rabbitmq_client=rabbitmq_client,
        )

    @classmethod
    async def create(
        cls,
        worker_settings: WorkerSettings | None = None,
        messaging_settings: MessagingSettings | None = None,
    ) -> "ProcessingQueueWorker":
        """
        Build a broker-connected worker from environment settings.

        Returns:
            ProcessingQueueWorker (not yet started)
        """
        messaging_settings = messaging_settings or get_messaging_settings()
        rabbitmq_client = RabbitMQClient.from_settings(messaging_settings)
        components = build_processing_components(
            store=create_document_store(),
            publisher=RabbitMQJobEventPublisher(MessagePublisher(rabbitmq_client)),
            cache=await create_snapshot_cache(),
        )
        return cls.from_components(
            components,
            worker_settings=worker_settings,
            rabbitmq_client=rabbitmq_client,
        )

    async def start(self) -> None:
        """Connect to RabbitMQ and consume until stopped."""
        if self.rabbitmq_client is None or self.consumer is None:
            raise RuntimeError("Worker has no RabbitMQ client; use dispatch_event instead")

        settings = self.worker_settings
        logger.info(f"Starting {settings.worker_name} (prefetch: {settings.prefetch_count})")

        self._is_running = True
        try:
            await self.rabbitmq_client.connect()
            await self.rabbitmq_client.setup_topology()

            bindings = [(Queues.PROCESSING_JOBS, self.handle_message)]
            if settings.consume_thought_events:
                bindings.append((Queues.THOUGHT_EVENTS, self.handle_message))

            await self.consumer.run(bindings)

        except Exception as e:
            logger.exception(f"Error running worker: {e}")
            raise
        finally:
            self._is_running = False

    async def stop(self) -> None:
        """Stop consuming and release resources."""
        logger.info(f"Stopping {self.worker_settings.worker_name}")

        if self.consumer is not None:
            self.consumer.stop()
            await self.consumer.stop_all()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self.rabbitmq_client is not None:
            await self.rabbitmq_client.disconnect()
        if self.extraction_engine is not None:
            await self.extraction_engine.close()
        await self.components.close()

        self._is_running = False
        logger.info(f"{self.worker_settings.worker_name} stopped")

    async def handle_job_created(self, user_id: str, job_id: str) -> JobOutcome | None:
        """
        Run the state machine for a new job.

        Args:
            user_id: Job owner
            job_id: Job id

        Returns:
            JobOutcome, or None when the job was ignored or could not be handled
        """
        try:
            outcome = await self.job_processor.handle_job(user_id, job_id)
        except Exception as e:
            logger.exception(f"Unhandled error for job {job_id}: {e}")
            return None

        if outcome is not None:
            logger.info(f"Job {job_id} finished with status {outcome.status}")
        return outcome

    async def handle_thought_created(self, user_id: str, thought_id: str) -> None:
        """
        Run the auto trigger for a new thought.

        Args:
            user_id: Thought owner
            thought_id: New thought
        """
        try:
            await self.components.triggers.on_thought_created(user_id, thought_id)
        except Exception as e:
            logger.exception(f"Failed to auto-process thought {thought_id}: {e}")

    async def dispatch_event(self, event: JobEvent) -> None:
        """Handle one event in the current task."""
        if isinstance(event, JobCreatedEvent):
            with job_log_context(event.job_id, event.thought_id, event.user_id):
                await self.handle_job_created(event.user_id, event.job_id)
        elif isinstance(event, ThoughtCreatedEvent):
            with job_log_context(thought_id=event.thought_id, user_id=event.user_id):
                await self.handle_thought_created(event.user_id, event.thought_id)

    async def schedule_event(self, event: JobEvent) -> None:
        """Handle one event in a background task."""
        task = asyncio.create_task(self.dispatch_event(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_message(self, message_data: dict[str, Any]) -> None:
        """
        Handle a decoded RabbitMQ message.

        Args:
            message_data: Parsed message body
        """
        try:
            event = parse_event(message_data)
        except ValueError as e:
            logger.error(f"Discarding malformed event: {e}")
            return

        if event is None:
            logger.warning(f"Ignoring event of unknown type {message_data.get('event_type')!r}")
            return

        await self.dispatch_event(event)

    @property
    def is_running(self) -> bool:
        """Check if worker is currently running."""
        return self._is_running


async def main() -> None:
    """Main entry point for the worker."""
    settings = get_settings()
    worker_settings = get_worker_settings()
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=worker_settings.worker_name,
    )

    if worker_settings.metrics_port:
        start_http_server(worker_settings.metrics_port)

    worker = await ProcessingQueueWorker.create(worker_settings=worker_settings)

    try:
        await worker.start()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Received shutdown signal")
    finally:
        await worker.stop()


if __name__ == "__main__":
    asyncio.run(main())
