"""
Wiring of the processing core.

The API service and the queue worker build the same object graph around a
document store, a snapshot cache and a job event publisher.
"""

from dataclasses import dataclass

from shared.cache.snapshot_cache import NullSnapshotCache, SnapshotCache
from shared.documents.base import DocumentStore
from shared.entitlements.config import EntitlementSettings
from shared.entitlements.gate import EntitlementGate
from shared.entitlements.identity import IdentityProvider
from shared.messaging.events import JobEventPublisher
from shared.processing.enqueuer import JobEnqueuer
from shared.processing.revert import RevertService
from shared.processing.triggers import ProcessingTriggers
from shared.rate_limiter.config import RateLimiterSettings
from shared.rate_limiter.limiter import ProcessingRateLimiter
from shared.utils.datetime_utils import Clock, get_utc_now


@dataclass
class ProcessingComponents:
    """Collaborators shared by every processing entry point."""

    store: DocumentStore
    cache: SnapshotCache
    gate: EntitlementGate
    rate_limiter: ProcessingRateLimiter
    enqueuer: JobEnqueuer
    revert_service: RevertService
    triggers: ProcessingTriggers

    async def close(self) -> None:
        """Release cache and store resources."""
        await self.cache.close()
        await self.store.close()


def build_processing_components(
    store: DocumentStore,
    publisher: JobEventPublisher,
    cache: SnapshotCache | None = None,
    identity_provider: IdentityProvider | None = None,
    entitlement_settings: EntitlementSettings | None = None,
    rate_limiter_settings: RateLimiterSettings | None = None,
    clock: Clock = get_utc_now,
) -> ProcessingComponents:
    """
    Build the processing object graph.

    Args:
        store: Document store
        publisher: Job event transport
        cache: Subscription snapshot cache (disabled if not provided)
        identity_provider: Anonymous-user lookup
        entitlement_settings: Entitlement settings
        rate_limiter_settings: Rate limiter settings
        clock: Source of the current time

    Returns:
        ProcessingComponents
    """
    cache = cache or NullSnapshotCache()
    gate = EntitlementGate(
        store,
        identity_provider=identity_provider,
        cache=cache,
        settings=entitlement_settings,
        clock=clock,
    )
    rate_limiter = ProcessingRateLimiter(store, settings=rate_limiter_settings, clock=clock)
    enqueuer = JobEnqueuer(store, gate, publisher, clock=clock)
    revert_service = RevertService(store, clock=clock)
    triggers = ProcessingTriggers(store, gate, rate_limiter, enqueuer, revert_service)
    return ProcessingComponents(
        store=store,
        cache=cache,
        gate=gate,
        rate_limiter=rate_limiter,
        enqueuer=enqueuer,
        revert_service=revert_service,
        triggers=triggers,
    )
