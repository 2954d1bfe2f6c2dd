"""
Main FastAPI application for the processing service.

Exposes the user-initiated processing triggers (process now, reprocess,
revert) and job inspection. With RabbitMQ disabled the queue worker runs
inside this process and picks up job events in background tasks.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from services.processing.app.api.health import router as health_router
from services.processing.app.api.v1.jobs import router as jobs_router
from services.processing.app.api.v1.thoughts import router as thoughts_router
from services.processing.app.core.config import get_settings
from services.processing.app.core.errors import register_exception_handlers
from shared.cache import create_snapshot_cache
from shared.config.logging import get_logger, setup_logging
from shared.documents.factory import create_document_store
from shared.messaging import InMemoryJobEventPublisher, MessagePublisher, RabbitMQClient
from shared.messaging.config import get_messaging_settings
from shared.messaging.events import JobEventPublisher, RabbitMQJobEventPublisher
from shared.observability.metrics import METRICS_CONTENT_TYPE, get_metrics
from shared.observability.middleware import MetricsMiddleware
from shared.processing.factory import ProcessingComponents, build_processing_components
from workers.thought_processing.worker import ProcessingQueueWorker

logger = get_logger(__name__)


async def _start_components(app: FastAPI) -> None:
    messaging_settings = get_messaging_settings()
    publisher: JobEventPublisher

    if messaging_settings.enabled:
        client = RabbitMQClient.from_settings(messaging_settings)
        await client.connect()
        await client.setup_topology()
        app.state.rabbitmq_client = client
        publisher = RabbitMQJobEventPublisher(MessagePublisher(client))
    else:
        publisher = InMemoryJobEventPublisher()

    components = build_processing_components(
        store=create_document_store(),
        publisher=publisher,
        cache=await create_snapshot_cache(),
    )
    app.state.components = components

    if isinstance(publisher, InMemoryJobEventPublisher):
        worker = ProcessingQueueWorker.from_components(components)
        publisher.dispatcher = worker.schedule_event
        app.state.worker = worker
        logger.info("in_process_worker_enabled")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifespan.

    Builds the processing components unless they were injected, and
    releases them on shutdown.
    """
    settings = get_settings()
    app.state.settings = settings

    owns_components = getattr(app.state, "components", None) is None
    if owns_components:
        await _start_components(app)

    logger.info("processing_service_started", service=settings.service_name)

    yield

    if owns_components:
        worker = getattr(app.state, "worker", None)
        if worker is not None:
            await worker.stop()
        else:
            await app.state.components.close()

        client = getattr(app.state, "rabbitmq_client", None)
        if client is not None:
            await client.disconnect()

    logger.info("processing_service_stopped", service=settings.service_name)


def create_app(components: ProcessingComponents | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        components: Pre-built processing components (built at startup if not provided)

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )

    app = FastAPI(
        title="Processing Service",
        description="AI processing queue for thoughts: enqueue, reprocess, revert",
        version=settings.service_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware, service_name=settings.service_name)

    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(thoughts_router, tags=["thoughts"])
    app.include_router(jobs_router, tags=["jobs"])

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "services.processing.app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
