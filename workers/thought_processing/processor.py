"""
Thought processing processor.

``ThoughtProcessingRunner`` performs one run over a thought: reload,
context, LLM extraction, action routing and the single combined write.
``JobProcessor`` drives a job document through its state machine around
that run, re-checks entitlement before it starts and records every outcome
on both the job and the thought.
"""

import logging
import time
from typing import Any

from shared.actions.config import ActionSettings
from shared.actions.processor import build_thought_update, process_actions
from shared.context.gatherer import ProcessingContextGatherer
from shared.documents.base import DocumentStore, Increment
from shared.documents.paths import DocumentPaths
from shared.entitlements.gate import EntitlementGate
from shared.exceptions import HandlerSpecNotFoundError, NotFoundError, RateLimitExceeded
from shared.extraction.engine import ActionExtractionEngine
from shared.handlers.resolver import resolve_handler_ids
from shared.handlers.specs import HandlerSpec, get_handler_spec_by_id
from shared.models.enums import AIProcessingStatus, JobStatus, ProcessingTrigger
from shared.models.job import Job
from shared.models.thought import Thought
from shared.observability.metrics import (
    job_run_duration_seconds,
    jobs_finished_total,
    llm_tokens_used_total,
)
from shared.processing.interaction_log import LLMInteractionLogger
from shared.rate_limiter.limiter import ProcessingRateLimiter
from shared.utils.datetime_utils import Clock, get_utc_now
from workers.thought_processing.models import JobOutcome, RunResult

logger = logging.getLogger(__name__)

MISSING_THOUGHT_ID = "Missing thoughtId"
ACCESS_UNAVAILABLE = "AI processing is not available for this account."


def load_handler_specs(thought: Thought, handler_ids: list[str] | None) -> list[HandlerSpec]:
    """
    Resolve the specs for a run.

    Falls back to the resolver when the job carries no ids. Unknown ids are
    skipped and duplicates dropped.

    Args:
        thought: Thought being processed
        handler_ids: Ids stored on the job

    Returns:
        Specs in order
    """
    ids = handler_ids if handler_ids else resolve_handler_ids(thought)
    specs: list[HandlerSpec] = []
    seen: set[str] = set()
    for handler_id in ids:
        if not handler_id or handler_id in seen:
            continue
        try:
            spec = get_handler_spec_by_id(handler_id)
        except HandlerSpecNotFoundError:
            logger.warning(f"Skipping unknown handler spec {handler_id}")
            continue
        seen.add(handler_id)
        specs.append(spec)
    return specs


class ThoughtProcessingRunner:
    """Runs the LLM pipeline over one thought."""

    def __init__(
        self,
        store: DocumentStore,
        context_gatherer: ProcessingContextGatherer,
        extraction_engine: ActionExtractionEngine,
        interaction_logger: LLMInteractionLogger | None = None,
        action_settings: ActionSettings | None = None,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize runner.

        Args:
            store: Document store
            context_gatherer: Source of the user's goals, projects, people, tasks and moods
            extraction_engine: LLM action extraction
            interaction_logger: Best-effort LLM interaction log
            action_settings: Confidence thresholds
            clock: Source of the current time
        """
        self.store = store
        self.context_gatherer = context_gatherer
        self.extraction_engine = extraction_engine
        self.interaction_logger = interaction_logger or LLMInteractionLogger(store, clock=clock)
        self.action_settings = action_settings
        self._clock = clock

    async def run(
        self,
        user_id: str,
        thought_id: str,
        trigger: str,
        handler_ids: list[str] | None = None,
    ) -> RunResult:
        """
        Process a thought once.

        Args:
            user_id: Thought owner
            thought_id: Thought to process
            trigger: auto, manual or reprocess
            handler_ids: Handlers stored on the job

        Returns:
            RunResult

        Raises:
            NotFoundError: If the thought does not exist
            Exception: Any failure after the thought was marked processing;
                the thought is marked failed before re-raising
        """
        path = DocumentPaths.thought(user_id, thought_id)
        snapshot = await self.store.get(path)
        if not snapshot.exists:
            raise NotFoundError("Thought not found", path=path)
        thought = Thought.from_snapshot(snapshot, id=thought_id)

        await self.store.update(path, {"aiProcessingStatus": AIProcessingStatus.PROCESSING.value})

        try:
            context = await self.context_gatherer.get_processing_context(user_id)
            specs = load_handler_specs(thought, handler_ids)
            spec_ids = [spec.id for spec in specs]
            logger.info(f"Processing thought {thought_id} with handlers: {', '.join(spec_ids)}")

            extraction = await self.extraction_engine.extract_actions(
                thought.text, context, specs, thought_tags=thought.tags
            )

            await self.interaction_logger.log(
                user_id=user_id,
                thought_id=thought_id,
                trigger=trigger,
                prompt=extraction.prompt,
                raw_response=extraction.raw_response,
                actions=extraction.actions,
                tool_spec_ids=spec_ids,
                usage=extraction.usage,
            )

            now = self._clock()
            processed = process_actions(
                extraction.actions, thought, settings=self.action_settings, now=now
            )
            result = build_thought_update(
                processed, thought, extraction.total_tokens, trigger, now=now
            )

            update: dict[str, Any] = dict(result.update)
            update["processingHistory"] = thought.history_documents() + [
                result.history_entry.to_document()
            ]
            if trigger == ProcessingTrigger.REPROCESS.value:
                update["reprocessCount"] = thought.reprocess_count + 1

            await self.store.update(path, update)

        except Exception as e:
            logger.error(f"Processing failed for thought {thought_id}: {e}")
            await self.store.update(
                path,
                {"aiProcessingStatus": AIProcessingStatus.FAILED.value, "aiError": str(e)},
            )
            raise

        entry = result.history_entry
        logger.info(
            f"Successfully processed thought {thought_id}: "
            f"{entry.changes_applied} changes, {entry.suggestions_count} suggestions"
        )
        return RunResult(
            thought_id=thought_id,
            trigger=trigger,
            handler_ids=spec_ids,
            actions_proposed=len(extraction.actions),
            changes_applied=entry.changes_applied,
            suggestions_count=entry.suggestions_count,
            tokens_used=entry.tokens_used,
        )


class JobProcessor:
    """
    Job state machine.

    queued -> failed (malformed), queued -> rate_limited (daily limit),
    queued -> failed (entitlement denied, thought blocked),
    queued -> processing -> completed | failed.
    """

    def __init__(
        self,
        store: DocumentStore,
        gate: EntitlementGate,
        rate_limiter: ProcessingRateLimiter,
        runner: ThoughtProcessingRunner,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize job processor.

        Args:
            store: Document store
            gate: Entitlement gate
            rate_limiter: Daily limit check and counter
            runner: Thought processing runner
            clock: Source of the current time
        """
        self.store = store
        self.gate = gate
        self.rate_limiter = rate_limiter
        self.runner = runner
        self._clock = clock

    async def _finish(
        self,
        user_id: str,
        job: Job,
        status: str,
        error: str | None = None,
        thought_status: str | None = None,
        run: RunResult | None = None,
    ) -> JobOutcome:
        update: dict[str, Any] = {"status": status, "completedAt": self._clock()}
        if error is not None:
            update["error"] = error
        await self.store.update(DocumentPaths.job(user_id, job.id), update)

        if thought_status and job.thought_id:
            await self._mark_thought(user_id, job.thought_id, thought_status, error)

        jobs_finished_total.labels(trigger=job.trigger, status=status).inc()
        return JobOutcome(job_id=job.id, status=status, error=error, run=run)

    async def _mark_thought(
        self, user_id: str, thought_id: str, status: str, error: str | None
    ) -> None:
        try:
            await self.store.update(
                DocumentPaths.thought(user_id, thought_id),
                {"aiProcessingStatus": status, "aiError": error},
            )
        except NotFoundError:
            logger.warning(f"Thought {thought_id} vanished before its status could be recorded")

    async def handle_job(self, user_id: str, job_id: str) -> JobOutcome | None:
        """
        Drive a newly created job to a terminal state.

        Nothing is raised: every failure is recorded on the job and the
        thought. Jobs that are missing or no longer queued are ignored, so
        a redelivered event never runs a job twice.

        Args:
            user_id: Job owner
            job_id: Job id

        Returns:
            JobOutcome, or None if the job was ignored
        """
        job_path = DocumentPaths.job(user_id, job_id)
        snapshot = await self.store.get(job_path)
        if not snapshot.exists:
            logger.warning(f"Queue job {job_id} not found for user {user_id}")
            return None

        job = Job.from_snapshot(snapshot, id=job_id)
        if job.status != JobStatus.QUEUED.value:
            logger.info(f"Skipping job {job_id} in status {job.status}")
            return None

        if not job.thought_id:
            logger.warning(f"Queue job {job_id} missing thoughtId")
            return await self._finish(user_id, job, JobStatus.FAILED.value, MISSING_THOUGHT_ID)

        try:
            await self.rate_limiter.ensure_daily_limit(user_id)
        except RateLimitExceeded as e:
            logger.warning(f"Job {job_id} rate limited: {e.message}")
            return await self._finish(
                user_id,
                job,
                JobStatus.RATE_LIMITED.value,
                e.message,
                thought_status=AIProcessingStatus.FAILED.value,
            )

        access = await self.gate.is_allowed(user_id)
        if not access.allowed:
            message = access.message or ACCESS_UNAVAILABLE
            logger.warning(f"Job {job_id} blocked for user {user_id}: {message}")
            return await self._finish(
                user_id,
                job,
                JobStatus.FAILED.value,
                message,
                thought_status=AIProcessingStatus.BLOCKED.value,
            )

        await self.store.update(
            job_path,
            {
                "status": JobStatus.PROCESSING.value,
                "startedAt": self._clock(),
                "attempts": Increment(1),
            },
        )

        started = time.perf_counter()
        try:
            run = await self.runner.run(user_id, job.thought_id, job.trigger, job.tool_spec_ids)
        except Exception as e:
            logger.exception(f"Processing job {job_id} failed: {e}")
            return await self._finish(
                user_id,
                job,
                JobStatus.FAILED.value,
                str(e) or "Unknown error",
                thought_status=AIProcessingStatus.FAILED.value,
            )
        finally:
            job_run_duration_seconds.labels(trigger=job.trigger).observe(
                time.perf_counter() - started
            )

        try:
            await self.rate_limiter.increment_daily_processing(user_id)
        except Exception as e:
            logger.error(f"Failed to count job {job_id} against the daily limit: {e}")
        llm_tokens_used_total.labels(trigger=job.trigger).inc(run.tokens_used)
        return await self._finish(user_id, job, JobStatus.COMPLETED.value, run=run)
