"""
Job enqueuer.

Validates a processing request, deduplicates in-flight work for the thought
and writes a queued job. The in-flight check, the handler resolution and
both writes run in one document-store transaction, so two concurrent
requests for the same thought cannot both create a job.
"""

from dataclasses import dataclass

from shared.config.logging import get_logger
from shared.documents.base import (
    DocumentSnapshot,
    DocumentStore,
    Filter,
    Transaction,
    generate_document_id,
)
from shared.documents.paths import DocumentPaths
from shared.entitlements.gate import EntitlementGate
from shared.exceptions import FailedPreconditionError, NotFoundError
from shared.handlers.enrollment import EnrollmentRepository
from shared.handlers.resolver import filter_to_enrolled, resolve_handler_ids
from shared.messaging.events import JobCreatedEvent, JobEventPublisher
from shared.models.enums import (
    IN_FLIGHT_JOB_STATUSES,
    AIProcessingStatus,
    EnqueueStatus,
    JobStatus,
    ProcessingTrigger,
)
from shared.models.thought import Thought
from shared.rate_limiter.limiter import check_reprocess_ceiling
from shared.utils.datetime_utils import Clock, get_utc_now

logger = get_logger(__name__)

THOUGHT_NOT_FOUND = "Thought not found"
THOUGHT_ALREADY_PROCESSED = "Thought already processed"
NO_ENROLLMENTS = "No tool enrollments found for user."
NO_ENROLLED_TOOLS = "No enrolled tools available for this thought."
NO_TOOLS_AFTER_FILTERING = "No enrolled tools available after filtering."


async def find_in_flight_job(
    reader: DocumentStore | Transaction, user_id: str, thought_id: str
) -> DocumentSnapshot | None:
    """
    Find a queued or processing job for a thought.

    Args:
        reader: Store, or a transaction to read through
        user_id: Thought owner
        thought_id: Thought to look up

    Returns:
        Snapshot of the first in-flight job, or None
    """
    jobs = await reader.query(
        DocumentPaths.jobs(user_id),
        filters=[
            Filter("thoughtId", "==", thought_id),
            Filter("status", "in", IN_FLIGHT_JOB_STATUSES),
        ],
        limit=1,
    )
    return jobs[0] if jobs else None


@dataclass(frozen=True)
class EnqueueResult:
    """Outcome of an enqueue request."""

    job_id: str
    status: str

    @property
    def queued(self) -> bool:
        """Whether a new job was created."""
        return self.status == EnqueueStatus.QUEUED.value


class JobEnqueuer:
    """Creates processing jobs for thoughts."""

    def __init__(
        self,
        store: DocumentStore,
        gate: EntitlementGate,
        publisher: JobEventPublisher,
        enrollments: EnrollmentRepository | None = None,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize enqueuer.

        Args:
            store: Document store
            gate: Entitlement gate consulted before anything is read
            publisher: Receives a job-created event after commit
            enrollments: Enrollment lookup (reads the store by default)
            clock: Source of the current time
        """
        self.store = store
        self.gate = gate
        self.publisher = publisher
        self.enrollments = enrollments or EnrollmentRepository(store)
        self._clock = clock

    async def enqueue(
        self,
        user_id: str,
        thought_id: str,
        trigger: str,
        handler_ids: list[str] | None = None,
        requested_by: str | None = None,
        allow_processed: bool = False,
        max_reprocess_count: int | None = None,
        entitlement_checked: bool = False,
    ) -> EnqueueResult:
        """
        Queue a thought for processing.

        Args:
            user_id: Thought owner
            thought_id: Thought to process
            trigger: auto, manual or reprocess
            handler_ids: Explicit handlers to run (resolved from the thought if empty)
            requested_by: Who asked (defaults to the user)
            allow_processed: Accept thoughts that already carry the processed tag
            max_reprocess_count: Reprocess ceiling enforced on reprocess triggers
            entitlement_checked: The caller already passed the entitlement gate

        Returns:
            EnqueueResult with the new or existing in-flight job id

        Raises:
            PermissionDeniedError: If AI processing is not permitted
            NotFoundError: If the thought does not exist
            FailedPreconditionError: If the thought is processed or no handler applies
            ResourceExhaustedError: If the reprocess ceiling is reached
        """
        if not entitlement_checked:
            await self.gate.ensure_allowed(user_id)

        thought_path = DocumentPaths.thought(user_id, thought_id)
        is_reprocess = trigger == ProcessingTrigger.REPROCESS.value

        async def check_and_create(transaction: Transaction) -> EnqueueResult:
            snapshot = await transaction.get(thought_path)
            if not snapshot.exists:
                raise NotFoundError(THOUGHT_NOT_FOUND, path=thought_path)

            thought = Thought.from_snapshot(snapshot, id=thought_id)
            if not allow_processed and thought.is_processed:
                raise FailedPreconditionError(THOUGHT_ALREADY_PROCESSED)

            in_flight = await find_in_flight_job(transaction, user_id, thought_id)
            if in_flight is not None:
                return EnqueueResult(in_flight.id, EnqueueStatus.ALREADY_QUEUED.value)

            if is_reprocess and max_reprocess_count is not None:
                check_reprocess_ceiling(thought, max_reprocess_count)

            if thought.is_in_flight:
                logger.warning(
                    "stale_in_flight_status",
                    user_id=user_id,
                    thought_id=thought_id,
                    status=thought.ai_processing_status,
                )

            enrolled = await self.enrollments.get_enrolled_handler_ids(user_id, transaction)
            if not enrolled:
                raise FailedPreconditionError(NO_ENROLLMENTS)

            if handler_ids:
                candidates = filter_to_enrolled(handler_ids, enrolled)
            else:
                candidates = resolve_handler_ids(thought, enrolled_ids=enrolled)
            if not candidates:
                raise FailedPreconditionError(NO_ENROLLED_TOOLS)

            tool_spec_ids = filter_to_enrolled(candidates, enrolled)
            if not tool_spec_ids:
                raise FailedPreconditionError(NO_TOOLS_AFTER_FILTERING)

            job_id = generate_document_id()
            transaction.create(
                DocumentPaths.job(user_id, job_id),
                {
                    "thoughtId": thought_id,
                    "trigger": trigger,
                    "status": JobStatus.QUEUED.value,
                    "requestedAt": self._clock(),
                    "requestedBy": requested_by or user_id,
                    "toolSpecIds": tool_spec_ids,
                    "attempts": 0,
                },
            )
            transaction.update(
                thought_path,
                {"aiProcessingStatus": AIProcessingStatus.PENDING.value, "aiError": None},
            )
            return EnqueueResult(job_id, EnqueueStatus.QUEUED.value)

        result = await self.store.run_transaction(check_and_create)

        if not result.queued:
            logger.info(
                "job_already_queued", user_id=user_id, thought_id=thought_id, job_id=result.job_id
            )
            return result

        logger.info(
            "job_enqueued",
            user_id=user_id,
            thought_id=thought_id,
            job_id=result.job_id,
            trigger=trigger,
        )
        await self.publisher.publish_job_created(
            JobCreatedEvent(
                user_id=user_id,
                job_id=result.job_id,
                thought_id=thought_id,
                trigger=trigger,
            )
        )
        return result
