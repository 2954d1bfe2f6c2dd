"""
Functional tests for the processing queue.

Events published by the triggers are dispatched straight into the worker,
so every call below runs the full pipeline: entitlement, rate limits,
enqueue, job state machine, LLM extraction (scripted), action routing and
the thought write.
"""

import pytest

from shared.documents.base import Filter
from shared.documents.paths import DocumentPaths
from shared.exceptions import FailedPreconditionError, RateLimitExceeded, ResourceExhaustedError
from shared.messaging.events import ThoughtCreatedEvent
from shared.rate_limiter.config import RateLimiterSettings
from shared.utils.datetime_utils import utc_date_key
from tests.factories import (
    THOUGHT_ID,
    USER_ID,
    FakeLLMClient,
    action,
    build_in_process_worker,
    seed_anonymous_user,
    seed_enrollments,
    seed_thought,
)


@pytest.fixture
def llm_client():
    """LLM that cleans up the text, tags it and suggests a task."""
    return FakeLLMClient(
        actions=[
            action("enhanceThought", 98, improvedText="Call Mom about the weekend trip."),
            action("addTag", 97, tag="family"),
            action("createTask", 90, title="Call Mom"),
        ]
    )


@pytest.fixture
def wired(pro_store, llm_client, clock, entitlement_settings, rate_limiter_settings):
    """Components, worker and publisher running in one process."""
    return build_in_process_worker(
        pro_store, llm_client, clock, entitlement_settings, rate_limiter_settings
    )


@pytest.fixture
def components(wired):
    """Processing components."""
    return wired[0]


@pytest.fixture
def publisher(wired):
    """In-process publisher."""
    return wired[2]


async def load_thought(store, thought_id=THOUGHT_ID):
    return (await store.get(DocumentPaths.thought(USER_ID, thought_id))).to_dict()


async def jobs_for(store, thought_id=THOUGHT_ID):
    return await store.query(
        DocumentPaths.jobs(USER_ID), filters=[Filter("thoughtId", "==", thought_id)]
    )


class TestAutoProcessing:
    """A new thought is processed automatically."""

    @pytest.mark.asyncio
    async def test_tagged_thought_runs_with_its_handler(self, pro_store, publisher, llm_client):
        """Test a tool-tasks thought end to end through the auto trigger."""
        seed_enrollments(pro_store, ["tasks"])
        seed_thought(pro_store, text="call mom abt weekend trip", tags=["tool-tasks"])

        await publisher.publish_thought_created(
            ThoughtCreatedEvent(user_id=USER_ID, thought_id=THOUGHT_ID)
        )

        jobs = await jobs_for(pro_store)
        assert len(jobs) == 1
        assert jobs[0].get("trigger") == "auto"
        assert jobs[0].get("toolSpecIds") == ["thoughts", "tasks"]
        assert jobs[0].get("status") == "completed"

        thought = await load_thought(pro_store)
        assert thought["aiProcessingStatus"] == "completed"
        assert thought["text"] == "Call Mom about the weekend trip."
        assert thought["tags"] == ["tool-tasks", "family", "processed"]
        assert [entry["trigger"] for entry in thought["processingHistory"]] == ["auto"]
        assert thought["aiSuggestions"][0]["data"] == {"title": "Call Mom"}

        assert len(llm_client.calls) == 1

    @pytest.mark.asyncio
    async def test_anonymous_user_blocked(self, store, clock, llm_client, entitlement_settings):
        """Test that an anonymous session without AI access never gets a job."""
        _, _, publisher = build_in_process_worker(
            store, llm_client, clock, entitlement_settings
        )
        seed_anonymous_user(store, allowAi=False, status="active")
        seed_enrollments(store, ["thoughts"])
        seed_thought(store)

        await publisher.publish_thought_created(
            ThoughtCreatedEvent(user_id=USER_ID, thought_id=THOUGHT_ID)
        )

        assert await jobs_for(store) == []
        session = (await store.get(DocumentPaths.anonymous_session(USER_ID))).to_dict()
        assert session["cleanupPending"] is True
        assert session["status"] == "blocked"
        assert llm_client.calls == []


class TestReprocessAndRevert:
    """Reprocess and revert after a completed run."""

    @pytest.mark.asyncio
    async def test_reprocess_with_revert_first(self, pro_store, components, clock):
        """Test that history gains a revert entry followed by the reprocess run."""
        seed_thought(pro_store, text="call mom abt weekend trip")
        await components.triggers.process_now(USER_ID, THOUGHT_ID)
        clock.advance(60)

        response = await components.triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        assert response.reverted
        thought = await load_thought(pro_store)
        assert [entry["trigger"] for entry in thought["processingHistory"]] == [
            "manual",
            "revert",
            "reprocess",
        ]
        assert thought["processingHistory"][1]["revertedChanges"]["tagsAdded"] == ["family"]
        assert thought["reprocessCount"] == 1
        assert thought["originalText"] == "call mom abt weekend trip"
        assert thought["text"] == "Call Mom about the weekend trip."

    @pytest.mark.asyncio
    async def test_rate_limited_reprocess_leaves_thought_untouched(
        self, pro_store, components, clock
    ):
        """Test that a refused revert-first reprocess does not revert."""
        seed_thought(pro_store, text="call mom abt weekend trip")
        await components.triggers.process_now(USER_ID, THOUGHT_ID)
        before = await load_thought(pro_store)
        clock.advance(1)

        with pytest.raises(RateLimitExceeded):
            await components.triggers.reprocess(USER_ID, THOUGHT_ID, revert_first=True)

        thought = await load_thought(pro_store)
        assert thought["text"] == "Call Mom about the weekend trip."
        assert thought["tags"] == before["tags"]
        assert thought["aiAppliedChanges"] == before["aiAppliedChanges"]
        assert [entry["trigger"] for entry in thought["processingHistory"]] == ["manual"]
        assert len(await jobs_for(pro_store)) == 1

    @pytest.mark.asyncio
    async def test_revert_refused_during_run(self, pro_store, components, llm_client, clock):
        """Test that a revert while a job is processing is refused and history survives."""
        seed_thought(pro_store, text="call mom abt weekend trip")
        await components.triggers.process_now(USER_ID, THOUGHT_ID)
        clock.advance(60)

        refused: list[Exception] = []

        async def revert_mid_run():
            try:
                await components.triggers.revert(USER_ID, THOUGHT_ID)
            except FailedPreconditionError as e:
                refused.append(e)

        llm_client.on_call = revert_mid_run
        await components.triggers.reprocess(USER_ID, THOUGHT_ID)

        assert len(refused) == 1
        assert refused[0].details["job_id"]
        thought = await load_thought(pro_store)
        assert [entry["trigger"] for entry in thought["processingHistory"]] == [
            "manual",
            "reprocess",
        ]
        assert thought["aiProcessingStatus"] == "completed"

    @pytest.mark.asyncio
    async def test_reprocess_ceiling(self, pro_store, components, clock):
        """Test that the fourth reprocess is refused."""
        seed_thought(pro_store)

        for _ in range(3):
            await components.triggers.reprocess(USER_ID, THOUGHT_ID)
            clock.advance(11)

        thought = await load_thought(pro_store)
        assert thought["reprocessCount"] == 3

        with pytest.raises(ResourceExhaustedError, match="Maximum reprocess limit reached"):
            await components.triggers.reprocess(USER_ID, THOUGHT_ID)
        assert len(await jobs_for(pro_store)) == 3

    @pytest.mark.asyncio
    async def test_revert_restores_snapshot(self, pro_store, components):
        """Test that revert restores the original text and tags exactly once."""
        seed_thought(pro_store, text="call mom abt weekend trip", tags=["personal"])
        await components.triggers.process_now(USER_ID, THOUGHT_ID)

        await components.triggers.revert(USER_ID, THOUGHT_ID)

        thought = await load_thought(pro_store)
        assert thought["text"] == "call mom abt weekend trip"
        assert thought["tags"] == ["personal"]
        assert thought["aiProcessingStatus"] is None
        assert thought["aiAppliedChanges"] is None

        with pytest.raises(FailedPreconditionError):
            await components.triggers.revert(USER_ID, THOUGHT_ID)


class TestRateLimits:
    """Interval and daily limits across runs."""

    @pytest.mark.asyncio
    async def test_interval(self, pro_store, components, clock):
        """Test that requests inside the interval fail and later ones succeed."""
        for thought_id in ("t1", "t2", "t3"):
            seed_thought(pro_store, thought_id=thought_id)

        await components.triggers.process_now(USER_ID, "t1")
        clock.advance(9)
        with pytest.raises(RateLimitExceeded):
            await components.triggers.process_now(USER_ID, "t2")
        clock.advance(2)
        result = await components.triggers.process_now(USER_ID, "t3")

        assert result.queued

    @pytest.mark.asyncio
    async def test_daily_limit(self, pro_store, llm_client, clock, entitlement_settings):
        """Test that runs past the daily ceiling are refused before any LLM call."""
        components, _, _ = build_in_process_worker(
            pro_store,
            llm_client,
            clock,
            entitlement_settings,
            RateLimiterSettings(min_interval_seconds=1, max_processing_per_day=2),
        )
        for thought_id in ("t1", "t2", "t3"):
            seed_thought(pro_store, thought_id=thought_id)

        await components.triggers.process_now(USER_ID, "t1")
        clock.advance(5)
        await components.triggers.process_now(USER_ID, "t2")
        clock.advance(5)

        with pytest.raises(RateLimitExceeded, match=r"Daily processing limit reached \(2\)."):
            await components.triggers.process_now(USER_ID, "t3")

        assert len(llm_client.calls) == 2
        counter = await pro_store.get(
            DocumentPaths.daily_processing_count(USER_ID, utc_date_key(clock.now))
        )
        assert counter.get("count") == 2

    @pytest.mark.asyncio
    async def test_failed_run_not_charged(self, pro_store, components, llm_client, clock):
        """Test that a failed run records the error without using daily quota."""
        seed_thought(pro_store)
        llm_client.text = "I could not decide"

        await components.triggers.process_now(USER_ID, THOUGHT_ID)

        thought = await load_thought(pro_store)
        assert thought["aiProcessingStatus"] == "failed"
        assert thought["aiError"] == "Invalid JSON response from LLM"
        jobs = await jobs_for(pro_store)
        assert jobs[0].get("status") == "failed"
        counter = await pro_store.get(
            DocumentPaths.daily_processing_count(USER_ID, utc_date_key(clock.now))
        )
        assert not counter.exists
