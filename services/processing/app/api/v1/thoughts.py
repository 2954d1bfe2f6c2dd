"""
Thought processing API v1 endpoints.

User-initiated triggers: process now, reprocess and revert.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from services.processing.app.api.schemas.requests import (
    ProcessThoughtRequest,
    ReprocessThoughtRequest,
)
from services.processing.app.api.schemas.responses import EnqueueResponse, RevertResponse
from services.processing.app.core.dependencies import get_triggers, get_user_id
from shared.exceptions import InvalidArgumentError
from shared.observability.metrics import jobs_enqueued_total
from shared.processing.triggers import REVERTED, ProcessingTriggers, TriggerResponse

router = APIRouter(prefix="/api/v1/thoughts")


def _require_thought_id(thought_id: str) -> str:
    thought_id = thought_id.strip()
    if not thought_id:
        raise InvalidArgumentError("thoughtId is required", field="thoughtId")
    return thought_id


def _to_response(result: TriggerResponse, trigger: str) -> EnqueueResponse:
    jobs_enqueued_total.labels(
        trigger=trigger, status="queued" if result.queued else "alreadyQueued"
    ).inc()
    return EnqueueResponse(
        message=result.message,
        job_id=result.job_id,
        queued=result.queued,
        reverted=result.reverted,
    )


@router.post(
    "/{thought_id}/process",
    response_model=EnqueueResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a thought for AI processing",
)
async def process_thought(
    thought_id: str,
    user_id: Annotated[str, Depends(get_user_id)],
    triggers: Annotated[ProcessingTriggers, Depends(get_triggers)],
    request: Annotated[ProcessThoughtRequest | None, Body()] = None,
) -> EnqueueResponse:
    """Check rate limits and queue the thought (idempotent while a job is in flight)."""
    result = await triggers.process_now(
        user_id,
        _require_thought_id(thought_id),
        handler_ids=request.handler_ids if request else None,
    )
    return _to_response(result, "manual")


@router.post(
    "/{thought_id}/reprocess",
    response_model=EnqueueResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Reprocess a thought, optionally reverting first",
)
async def reprocess_thought(
    thought_id: str,
    user_id: Annotated[str, Depends(get_user_id)],
    triggers: Annotated[ProcessingTriggers, Depends(get_triggers)],
    request: Annotated[ReprocessThoughtRequest | None, Body()] = None,
) -> EnqueueResponse:
    """Queue a reprocess run; fails once the thought hit its reprocess ceiling."""
    request = request or ReprocessThoughtRequest()
    result = await triggers.reprocess(
        user_id,
        _require_thought_id(thought_id),
        revert_first=request.revert_first,
        handler_ids=request.handler_ids,
    )
    return _to_response(result, "reprocess")


@router.post(
    "/{thought_id}/revert",
    response_model=RevertResponse,
    summary="Revert the last AI changes on a thought",
)
async def revert_thought(
    thought_id: str,
    user_id: Annotated[str, Depends(get_user_id)],
    triggers: Annotated[ProcessingTriggers, Depends(get_triggers)],
) -> RevertResponse:
    """Restore the pre-processing text and tags."""
    reverted = await triggers.revert(user_id, _require_thought_id(thought_id))
    return RevertResponse(message=REVERTED, reverted_changes=reverted)
