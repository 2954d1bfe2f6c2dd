"""
Processing entry points.

Each trigger runs the same pipeline (entitlement, then rate limits, then
enqueue) and differs only in how failures surface: the auto trigger on thought
creation has no caller to report to, so it logs and skips, while the
user-initiated triggers raise taxonomy errors.
"""

from dataclasses import dataclass
from typing import Any

from shared.config.logging import get_logger
from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths
from shared.entitlements.gate import EntitlementGate
from shared.exceptions import FocusQueueError, NotFoundError, RateLimitExceeded
from shared.handlers.resolver import resolve_handler_ids
from shared.models.enums import ProcessingTrigger
from shared.models.thought import Thought
from shared.processing.enqueuer import (
    THOUGHT_NOT_FOUND,
    EnqueueResult,
    JobEnqueuer,
    find_in_flight_job,
)
from shared.processing.revert import RevertService
from shared.rate_limiter.limiter import ProcessingRateLimiter

logger = get_logger(__name__)

PROCESS_QUEUED = "Thought queued for processing"
PROCESS_ALREADY_QUEUED = "Thought already queued for processing"
REPROCESS_QUEUED = "Thought reprocess queued successfully"
REPROCESS_ALREADY_QUEUED = "Thought already queued for reprocessing"
REVERTED = "AI changes reverted successfully"


@dataclass(frozen=True)
class TriggerResponse:
    """Result returned to user-initiated triggers."""

    job_id: str | None
    queued: bool
    message: str
    reverted: bool = False


class ProcessingTriggers:
    """Auto, process-now, reprocess and revert entry points."""

    def __init__(
        self,
        store: DocumentStore,
        gate: EntitlementGate,
        rate_limiter: ProcessingRateLimiter,
        enqueuer: JobEnqueuer,
        revert_service: RevertService,
    ):
        """
        Initialize triggers.

        Args:
            store: Document store
            gate: Entitlement gate
            rate_limiter: Interval, daily and reprocess limits
            enqueuer: Job enqueuer
            revert_service: Revert subsystem
        """
        self.store = store
        self.gate = gate
        self.rate_limiter = rate_limiter
        self.enqueuer = enqueuer
        self.revert_service = revert_service

    async def _load_thought(self, user_id: str, thought_id: str) -> Thought | None:
        snapshot = await self.store.get(DocumentPaths.thought(user_id, thought_id))
        if not snapshot.exists:
            return None
        return Thought.from_snapshot(snapshot, id=thought_id)

    async def _ensure_limits(self, user_id: str) -> None:
        await self.rate_limiter.ensure_daily_limit(user_id)
        await self.rate_limiter.ensure_interval_limit(user_id)

    async def _ensure_allowed(self, user_id: str) -> None:
        await self.gate.ensure_allowed(user_id)
        await self._ensure_limits(user_id)

    async def on_thought_created(self, user_id: str, thought_id: str) -> EnqueueResult | None:
        """
        Auto trigger for a newly created thought.

        Never raises for expected outcomes: already processed thoughts,
        denied entitlement, rate limits and enqueue precondition failures
        are logged and skipped.

        Args:
            user_id: Thought owner
            thought_id: New thought

        Returns:
            EnqueueResult, or None if the thought was skipped
        """
        thought = await self._load_thought(user_id, thought_id)
        if thought is None:
            logger.info("auto_trigger_skipped", thought_id=thought_id, reason="not_found")
            return None

        if thought.ai_processing_status or thought.is_processed:
            logger.info("auto_trigger_skipped", thought_id=thought_id, reason="already_processed")
            return None

        access = await self.gate.is_allowed(user_id)
        if not access.allowed:
            logger.info(
                "auto_trigger_skipped",
                user_id=user_id,
                thought_id=thought_id,
                reason=access.reason_code,
            )
            return None

        try:
            await self._ensure_limits(user_id)
        except RateLimitExceeded as e:
            logger.info(
                "auto_trigger_rate_limited", user_id=user_id, thought_id=thought_id, error=e.message
            )
            return None

        try:
            return await self.enqueuer.enqueue(
                user_id,
                thought_id,
                ProcessingTrigger.AUTO.value,
                handler_ids=resolve_handler_ids(thought),
                requested_by=user_id,
                entitlement_checked=True,
            )
        except FocusQueueError as e:
            logger.warning(
                "auto_enqueue_skipped",
                user_id=user_id,
                thought_id=thought_id,
                error=e.message,
                error_code=e.error_code,
            )
            return None

    async def process_now(
        self, user_id: str, thought_id: str, handler_ids: list[str] | None = None
    ) -> TriggerResponse:
        """
        User-initiated "process now".

        Raises:
            PermissionDeniedError: If AI processing is not permitted
            RateLimitExceeded: If the daily or interval limit is hit
            NotFoundError: If the thought does not exist
            FailedPreconditionError: If the thought cannot be enqueued
        """
        await self._ensure_allowed(user_id)

        result = await self.enqueuer.enqueue(
            user_id,
            thought_id,
            ProcessingTrigger.MANUAL.value,
            handler_ids=handler_ids,
            requested_by=user_id,
            entitlement_checked=True,
        )
        return TriggerResponse(
            job_id=result.job_id,
            queued=result.queued,
            message=PROCESS_QUEUED if result.queued else PROCESS_ALREADY_QUEUED,
        )

    async def reprocess(
        self,
        user_id: str,
        thought_id: str,
        revert_first: bool = False,
        handler_ids: list[str] | None = None,
    ) -> TriggerResponse:
        """
        User-initiated reprocess, optionally reverting first.

        Every check runs before the revert, so a refused request leaves the
        thought untouched. The revert only happens when the thought carries
        applied changes and no job for it is in flight.

        Raises:
            NotFoundError: If the thought does not exist
            ResourceExhaustedError: If the reprocess ceiling or a rate limit is hit
            PermissionDeniedError: If AI processing is not permitted
            FailedPreconditionError: If no handler applies, or a job started
                before the revert could run
        """
        thought = await self._load_thought(user_id, thought_id)
        if thought is None:
            raise NotFoundError(THOUGHT_NOT_FOUND, path=DocumentPaths.thought(user_id, thought_id))

        self.rate_limiter.ensure_reprocess_allowed(thought)
        await self._ensure_allowed(user_id)

        in_flight = await find_in_flight_job(self.store, user_id, thought_id)
        if in_flight is not None:
            logger.info(
                "job_already_queued", user_id=user_id, thought_id=thought_id, job_id=in_flight.id
            )
            return TriggerResponse(
                job_id=in_flight.id, queued=False, message=REPROCESS_ALREADY_QUEUED
            )

        reverted = False
        if revert_first and thought.ai_applied_changes:
            await self.revert_service.revert(user_id, thought_id)
            reverted = True

        result = await self.enqueuer.enqueue(
            user_id,
            thought_id,
            ProcessingTrigger.REPROCESS.value,
            handler_ids=handler_ids,
            requested_by=user_id,
            allow_processed=True,
            max_reprocess_count=self.rate_limiter.settings.max_reprocess_count,
            entitlement_checked=True,
        )
        return TriggerResponse(
            job_id=result.job_id,
            queued=result.queued,
            message=REPROCESS_QUEUED if result.queued else REPROCESS_ALREADY_QUEUED,
            reverted=reverted,
        )

    async def revert(self, user_id: str, thought_id: str) -> dict[str, Any]:
        """
        User-initiated revert.

        Returns:
            The applied-changes record that was undone
        """
        return await self.revert_service.revert(user_id, thought_id)
