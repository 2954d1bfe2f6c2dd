"""
Revert of automated thought changes.

The read, the in-flight job check and the write share one transaction, so
a revert never races a run that would rewrite the thought from an older
snapshot.
"""

from datetime import datetime
from typing import Any

from shared.config.logging import get_logger
from shared.documents.base import DocumentStore, Transaction
from shared.documents.paths import DocumentPaths
from shared.exceptions import FailedPreconditionError, NotFoundError
from shared.models.enums import ProcessingTrigger
from shared.models.thought import ProcessingHistoryEntry, Thought
from shared.processing.enqueuer import THOUGHT_NOT_FOUND, find_in_flight_job
from shared.utils.datetime_utils import Clock, get_utc_now

logger = get_logger(__name__)

NOTHING_TO_REVERT = "No AI changes to revert"
JOB_IN_FLIGHT = "Thought is being processed; try again once the job finishes."


def build_revert_update(thought: Thought, now: datetime) -> dict[str, Any]:
    """
    Build the partial update that undoes the last automated mutation.

    Text falls back to the current text when no snapshot was taken; tags
    fall back to an empty list.

    Args:
        thought: Thought carrying ``aiAppliedChanges``
        now: Revert timestamp

    Returns:
        Partial update including the extended history
    """
    entry = ProcessingHistoryEntry(
        processed_at=now,
        trigger=ProcessingTrigger.REVERT.value,
        status="completed",
        reverted_changes=thought.ai_applied_changes,
    )
    return {
        "text": thought.original_text or thought.text,
        "tags": list(thought.original_tags or []),
        "aiProcessingStatus": None,
        "aiAppliedChanges": None,
        "aiSuggestions": None,
        "aiError": None,
        "originalText": None,
        "originalTags": None,
        "processingHistory": thought.history_documents() + [entry.to_document()],
    }


class RevertService:
    """Restores thoughts to their pre-processing snapshot."""

    def __init__(self, store: DocumentStore, clock: Clock = get_utc_now):
        """
        Initialize service.

        Args:
            store: Document store
            clock: Source of the current time
        """
        self.store = store
        self._clock = clock

    async def revert(self, user_id: str, thought_id: str) -> dict[str, Any]:
        """
        Revert the last automated mutation of a thought.

        Args:
            user_id: Thought owner
            thought_id: Thought to revert

        Returns:
            The applied-changes record that was undone

        Raises:
            NotFoundError: If the thought does not exist
            FailedPreconditionError: If the thought has no applied changes or a
                job for it is queued or processing
        """
        path = DocumentPaths.thought(user_id, thought_id)

        async def check_and_revert(transaction: Transaction) -> dict[str, Any]:
            snapshot = await transaction.get(path)
            if not snapshot.exists:
                raise NotFoundError(THOUGHT_NOT_FOUND, path=path)

            thought = Thought.from_snapshot(snapshot, id=thought_id)
            if not thought.ai_applied_changes:
                raise FailedPreconditionError(NOTHING_TO_REVERT)

            job = await find_in_flight_job(transaction, user_id, thought_id)
            if job is not None:
                raise FailedPreconditionError(JOB_IN_FLIGHT, details={"job_id": job.id})

            transaction.update(path, build_revert_update(thought, self._clock()))
            return thought.ai_applied_changes

        reverted = await self.store.run_transaction(check_and_revert)

        logger.info("thought_reverted", user_id=user_id, thought_id=thought_id)
        return reverted
