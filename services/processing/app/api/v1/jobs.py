"""
Processing job API v1 endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from services.processing.app.api.schemas.responses import JobResponse
from services.processing.app.core.dependencies import get_document_store, get_user_id
from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths
from shared.exceptions import NotFoundError
from shared.models.job import Job

router = APIRouter(prefix="/api/v1/jobs")


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get a processing job",
)
async def get_job(
    job_id: str,
    user_id: Annotated[str, Depends(get_user_id)],
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> JobResponse:
    """Return one of the caller's jobs."""
    path = DocumentPaths.job(user_id, job_id)
    snapshot = await store.get(path)
    if not snapshot.exists:
        raise NotFoundError("Job not found", path=path)

    job = Job.from_snapshot(snapshot, id=job_id)
    return JobResponse.model_validate(job.model_dump())
