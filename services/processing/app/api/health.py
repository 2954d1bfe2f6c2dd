"""
Health check endpoints for the processing service.
"""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from services.processing.app.core.config import ProcessingServiceSettings, get_settings
from services.processing.app.core.dependencies import get_document_store
from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths

router = APIRouter()


class HealthStatus(BaseModel):
    """Health status response model."""

    status: str = Field(..., description="Service status (healthy/unhealthy)")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Check timestamp")


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with dependency checks."""

    document_store: str = Field(..., description="Document store status")
    messaging: str = Field(..., description="RabbitMQ status (or in-process)")


@router.get(
    "/health",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check(
    settings: Annotated[ProcessingServiceSettings, Depends(get_settings)],
) -> HealthStatus:
    """Basic health check endpoint."""
    return HealthStatus(
        status="healthy",
        service=settings.service_name,
        version=settings.service_version,
        timestamp=datetime.now(UTC),
    )


async def _store_status(store: DocumentStore) -> str:
    try:
        await store.get(DocumentPaths.user("__health__"))
        return "healthy"
    except Exception:
        return "unhealthy"


async def _messaging_status(request: Request) -> str:
    client = getattr(request.app.state, "rabbitmq_client", None)
    if client is None:
        return "in-process"
    return "healthy" if await client.health_check() else "unhealthy"


@router.get(
    "/health/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check(
    request: Request,
    settings: Annotated[ProcessingServiceSettings, Depends(get_settings)],
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> DetailedHealthStatus:
    """
    Detailed health check endpoint with dependency validation.

    Checks:
    - Document store connectivity
    - RabbitMQ connectivity (when events go through the broker)
    """
    store_status = await _store_status(store)
    messaging_status = await _messaging_status(request)
    healthy = store_status == "healthy" and messaging_status != "unhealthy"

    return DetailedHealthStatus(
        status="healthy" if healthy else "unhealthy",
        service=settings.service_name,
        version=settings.service_version,
        timestamp=datetime.now(UTC),
        document_store=store_status,
        messaging=messaging_status,
    )


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> dict[str, str]:
    """
    Readiness check for container orchestration.

    Raises:
        HTTPException: If the document store is unreachable
    """
    if await _store_status(store) != "healthy":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready: document store unavailable",
        )
    return {"status": "ready"}


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check() -> dict[str, str]:
    """Liveness check: the process is serving requests."""
    return {"status": "alive"}
