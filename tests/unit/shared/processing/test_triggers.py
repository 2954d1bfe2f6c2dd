"""
Unit tests for processing triggers.
"""

import pytest

from shared.documents.paths import DocumentPaths
from shared.exceptions import (
    FailedPreconditionError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceeded,
    ResourceExhaustedError,
)
from shared.messaging.events import InMemoryJobEventPublisher
from shared.processing.factory import build_processing_components
from shared.utils.datetime_utils import utc_date_key
from tests.factories import THOUGHT_ID, USER_ID, seed_free_user, seed_thought

JOB_ID = "job_in_flight"


@pytest.fixture
def publisher():
    """Publisher that records events."""
    return InMemoryJobEventPublisher()


@pytest.fixture
def components(pro_store, publisher, entitlement_settings, rate_limiter_settings, clock):
    """Processing components over a store with a pro user."""
    return build_processing_components(
        pro_store,
        publisher,
        entitlement_settings=entitlement_settings,
        rate_limiter_settings=rate_limiter_settings,
        clock=clock,
    )


@pytest.fixture
def triggers(components):
    """Trigger entry points."""
    return components.triggers


def seed_in_flight_job(store, status="queued"):
    store._documents[DocumentPaths.job(USER_ID, JOB_ID)] = {
        "thoughtId": THOUGHT_ID,
        "trigger": "manual",
        "status": status,
        "toolSpecIds": ["thoughts"],
        "attempts": 0,
    }


async def load(store):
    return (await store.get(DocumentPaths.thought(USER_ID, THOUGHT_ID))).to_dict()


def applied_thought(store, **fields):
    return seed_thought(
        store,
        text="Call mom about the trip",
        tags=["trip", "processed"],
        originalText="call mom abt trip",
        originalTags=[],
        aiProcessingStatus="completed",
        aiAppliedChanges={"tagsAdded": ["trip"], "appliedBy": "auto"},
        **fields,
    )


class TestOnThoughtCreated:
    """Tests for the auto trigger."""

    @pytest.mark.asyncio
    async def test_enqueues(self, triggers, pro_store, publisher):
        """Test that a new thought is queued with the auto trigger."""
        seed_thought(pro_store)

        result = await triggers.on_thought_created(USER_ID, THOUGHT_ID)

        assert result.queued
        assert publisher.job_events[0].trigger == "auto"

    @pytest.mark.asyncio
    async def test_skips_missing_thought(self, triggers, publisher):
        """Test that a missing thought is skipped."""
        assert await triggers.on_thought_created(USER_ID, "missing") is None
        assert publisher.events == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields", [{"aiProcessingStatus": "completed"}, {"tags": ["processed"]}]
    )
    async def test_skips_processed(self, triggers, pro_store, publisher, fields):
        """Test that thoughts with a status or the processed tag are skipped."""
        seed_thought(pro_store, **fields)

        assert await triggers.on_thought_created(USER_ID, THOUGHT_ID) is None
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_skips_when_denied(self, triggers, pro_store, publisher):
        """Test that a free user is skipped silently."""
        seed_free_user(pro_store)
        seed_thought(pro_store)

        assert await triggers.on_thought_created(USER_ID, THOUGHT_ID) is None
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_skips_when_rate_limited(self, triggers, pro_store, clock):
        """Test that the interval limit silently skips the second thought."""
        seed_thought(pro_store, thought_id="t1")
        seed_thought(pro_store, thought_id="t2")

        assert await triggers.on_thought_created(USER_ID, "t1") is not None
        clock.advance(3)
        assert await triggers.on_thought_created(USER_ID, "t2") is None

    @pytest.mark.asyncio
    async def test_skips_when_no_handler_enrolled(self, triggers, pro_store):
        """Test that enqueue precondition failures are swallowed."""
        pro_store._documents.pop(DocumentPaths.tool_enrollment(USER_ID, "thoughts"))
        seed_thought(pro_store)

        assert await triggers.on_thought_created(USER_ID, THOUGHT_ID) is None


class TestProcessNow:
    """Tests for the process-now trigger."""

    @pytest.mark.asyncio
    async def test_queued_then_already_queued(self, triggers, pro_store, clock):
        """Test the queued and already-queued messages."""
        seed_thought(pro_store)

        first = await triggers.process_now(USER_ID, THOUGHT_ID)
        clock.advance(11)
        second = await triggers.process_now(USER_ID, THOUGHT_ID)

        assert first.queued
        assert first.message == "Thought queued for processing"
        assert not second.queued
        assert second.job_id == first.job_id
        assert second.message == "Thought already queued for processing"

    @pytest.mark.asyncio
    async def test_interval_limit(self, triggers, pro_store, clock):
        """Test that a second request inside the interval is rejected."""
        seed_thought(pro_store, thought_id="t1")
        seed_thought(pro_store, thought_id="t2")
        await triggers.process_now(USER_ID, "t1")
        clock.advance(5)

        with pytest.raises(RateLimitExceeded) as exc_info:
            await triggers.process_now(USER_ID, "t2")

        assert exc_info.value.error_code == "resource-exhausted"
        assert exc_info.value.message == "Please wait a few seconds before processing another thought."

    @pytest.mark.asyncio
    async def test_daily_limit(self, triggers, pro_store, clock):
        """Test that the daily ceiling rejects before anything is charged."""
        seed_thought(pro_store)
        pro_store._documents[DocumentPaths.daily_processing_count(USER_ID, utc_date_key(clock.now))] = {
            "count": 50
        }

        with pytest.raises(RateLimitExceeded, match=r"Daily processing limit reached \(50\)."):
            await triggers.process_now(USER_ID, THOUGHT_ID)

        usage = await pro_store.get(DocumentPaths.processing_usage(USER_ID))
        assert not usage.exists

    @pytest.mark.asyncio
    async def test_denied(self, triggers, pro_store):
        """Test that a free user gets permission-denied."""
        seed_free_user(pro_store)
        seed_thought(pro_store)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await triggers.process_now(USER_ID, THOUGHT_ID)
        assert exc_info.value.message == "Focus Notebook Pro is required to process thoughts with AI."

    @pytest.mark.asyncio
    async def test_denied_requests_never_charge_the_interval(self, triggers, pro_store, clock):
        """Test that repeated denied requests keep failing on entitlement."""
        seed_free_user(pro_store)
        seed_thought(pro_store)

        with pytest.raises(PermissionDeniedError):
            await triggers.process_now(USER_ID, THOUGHT_ID)
        clock.advance(2)
        with pytest.raises(PermissionDeniedError):
            await triggers.process_now(USER_ID, THOUGHT_ID)

        usage = await pro_store.get(DocumentPaths.processing_usage(USER_ID))
        assert not usage.exists

    @pytest.mark.asyncio
    async def test_denied_reprocess_never_charges_the_interval(self, triggers, pro_store, clock):
        """Test that a denied reprocess reports permission-denied twice in a row."""
        seed_free_user(pro_store)
        seed_thought(pro_store)

        for _ in range(2):
            with pytest.raises(PermissionDeniedError):
                await triggers.reprocess(USER_ID, THOUGHT_ID)
            clock.advance(2)

        usage = await pro_store.get(DocumentPaths.processing_usage(USER_ID))
        assert not usage.exists


class TestReprocess:
    """Tests for the reprocess trigger."""

    @pytest.mark.asyncio
    async def test_reprocess_processed_thought(self, triggers, pro_store, publisher):
        """Test that a processed thought can be reprocessed."""
        applied_thought(pro_store)

        response = await triggers.reprocess(USER_ID, THOUGHT_ID)

        assert response.queued
        assert not response.reverted
        assert response.message == "Thought reprocess queued successfully"
        assert publisher.job_events[0].trigger == "reprocess"

    @pytest.mark.asyncio
    async def test_revert_first(self, triggers, pro_store):
        """Test that revert-first restores the snapshot before queueing."""
        applied_thought(pro_store)

        response = await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert response.reverted
        thought = (await pro_store.get(DocumentPaths.thought(USER_ID, THOUGHT_ID))).to_dict()
        assert thought["text"] == "call mom abt trip"
        assert thought["tags"] == []
        assert thought["aiProcessingStatus"] == "pending"
        assert thought["processingHistory"][-1]["trigger"] == "revert"

    @pytest.mark.asyncio
    async def test_revert_first_without_changes(self, triggers, pro_store):
        """Test that revert-first is a no-op when nothing was applied."""
        seed_thought(pro_store)

        response = await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert not response.reverted
        assert response.queued

    @pytest.mark.asyncio
    async def test_ceiling(self, triggers, pro_store):
        """Test that the reprocess ceiling rejects without reverting."""
        applied_thought(pro_store, reprocessCount=3)

        with pytest.raises(ResourceExhaustedError, match=r"Maximum reprocess limit reached \(3\)"):
            await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        thought = await pro_store.get(DocumentPaths.thought(USER_ID, THOUGHT_ID))
        assert thought.get("aiAppliedChanges") is not None

    @pytest.mark.asyncio
    async def test_not_found(self, triggers):
        """Test reprocessing a missing thought."""
        with pytest.raises(NotFoundError):
            await triggers.reprocess(USER_ID, "missing")

    @pytest.mark.asyncio
    async def test_revert(self, triggers, pro_store):
        """Test the standalone revert entry point."""
        applied_thought(pro_store)

        reverted = await triggers.revert(USER_ID, THOUGHT_ID)

        assert reverted == {"tagsAdded": ["trip"], "appliedBy": "auto"}

    @pytest.mark.asyncio
    async def test_denied_revert_first_changes_nothing(self, triggers, pro_store):
        """Test that a denied revert-first reprocess leaves the thought as it was."""
        seed_free_user(pro_store)
        applied_thought(pro_store)
        before = await load(pro_store)

        with pytest.raises(PermissionDeniedError):
            await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert await load(pro_store) == before

    @pytest.mark.asyncio
    async def test_rate_limited_revert_first_changes_nothing(self, triggers, pro_store, clock):
        """Test that the interval limit refuses before the revert runs."""
        seed_thought(pro_store, thought_id="other")
        await triggers.process_now(USER_ID, "other")
        applied_thought(pro_store)
        before = await load(pro_store)
        clock.advance(1)

        with pytest.raises(RateLimitExceeded):
            await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert await load(pro_store) == before

    @pytest.mark.asyncio
    async def test_in_flight_job_skips_revert(self, triggers, pro_store, publisher):
        """Test that an in-flight job is reported without reverting or queueing."""
        applied_thought(pro_store)
        seed_in_flight_job(pro_store, status="processing")
        before = await load(pro_store)

        response = await triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert not response.queued
        assert not response.reverted
        assert response.job_id == JOB_ID
        assert response.message == "Thought already queued for reprocessing"
        assert await load(pro_store) == before
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_revert_refused_while_job_in_flight(self, triggers, pro_store):
        """Test that the standalone revert waits for queued work."""
        applied_thought(pro_store)
        seed_in_flight_job(pro_store)

        with pytest.raises(FailedPreconditionError) as exc_info:
            await triggers.revert(USER_ID, THOUGHT_ID)

        assert exc_info.value.details == {"job_id": JOB_ID}
        thought = await load(pro_store)
        assert thought["aiAppliedChanges"] == {"tagsAdded": ["trip"], "appliedBy": "auto"}
