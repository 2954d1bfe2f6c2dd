"""
Per-user processing rate limits.

Two independent limits guard AI processing:

- The interval limit keeps requests at least ``min_interval_seconds`` apart.
  It is checked and charged in one transaction on ``processingUsage/meta``,
  so a rejected request never advances ``lastProcessedAt``.
- The daily limit caps completed runs per UTC day. Checking does not
  charge; the counter is incremented only after a run completes.

Both raise :class:`RateLimitExceeded`; callers decide whether that is fatal
or a silent skip.
"""

from datetime import datetime, timedelta

from shared.config.logging import get_logger
from shared.documents.base import DocumentStore, Transaction
from shared.documents.paths import DocumentPaths
from shared.exceptions import RateLimitExceeded, ResourceExhaustedError
from shared.models.thought import Thought
from shared.rate_limiter.config import RateLimiterSettings, get_rate_limiter_settings
from shared.utils.datetime_utils import Clock, get_utc_now, to_datetime, utc_date_key

logger = get_logger(__name__)

INTERVAL_LIMIT_MESSAGE = "Please wait a few seconds before processing another thought."


def _seconds_until_next_day(now: datetime) -> float:
    tomorrow = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return (tomorrow - now).total_seconds()


def check_reprocess_ceiling(thought: Thought, limit: int) -> None:
    """
    Raise if a thought has been reprocessed ``limit`` times already.

    Raises:
        ResourceExhaustedError: If the ceiling is reached
    """
    if thought.reprocess_count >= limit:
        raise ResourceExhaustedError(
            f"Maximum reprocess limit reached ({limit})",
            details={"reprocess_count": thought.reprocess_count, "limit": limit},
        )


class ProcessingRateLimiter:
    """Interval, daily and reprocess limits for AI processing."""

    def __init__(
        self,
        store: DocumentStore,
        settings: RateLimiterSettings | None = None,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize rate limiter.

        Args:
            store: Document store holding the counters
            settings: Rate limiter configuration
            clock: Source of the current time
        """
        self.store = store
        self.settings = settings or get_rate_limiter_settings()
        self._clock = clock

    async def ensure_interval_limit(self, user_id: str) -> None:
        """
        Check and charge the minimum-interval limit.

        Args:
            user_id: User ID

        Raises:
            RateLimitExceeded: If the previous request was too recent
        """
        path = DocumentPaths.processing_usage(user_id)
        min_interval = self.settings.min_interval_seconds

        async def check_and_charge(transaction: Transaction) -> None:
            usage = await transaction.get(path)
            now = self._clock()
            last_processed_at = to_datetime(usage.get("lastProcessedAt"))

            if last_processed_at is not None:
                elapsed = (now - last_processed_at).total_seconds()
                if elapsed < min_interval:
                    raise RateLimitExceeded(
                        INTERVAL_LIMIT_MESSAGE,
                        retry_after=min_interval - elapsed,
                        limit="interval",
                    )

            transaction.set(path, {"lastProcessedAt": now, "updatedAt": now}, merge=True)

        try:
            await self.store.run_transaction(check_and_charge)
        except RateLimitExceeded as e:
            logger.info("interval_limit_hit", user_id=user_id, retry_after=e.retry_after)
            raise

    async def get_daily_count(self, user_id: str, now: datetime | None = None) -> int:
        """
        Read today's completed-run counter.

        Args:
            user_id: User ID
            now: Moment whose UTC day is read (defaults to now)

        Returns:
            Number of completed runs today
        """
        date_key = utc_date_key(now or self._clock())
        counter = await self.store.get(DocumentPaths.daily_processing_count(user_id, date_key))
        count = counter.get("count", 0)
        return count if isinstance(count, int) else 0

    async def ensure_daily_limit(self, user_id: str) -> int:
        """
        Check the daily ceiling without charging it.

        Args:
            user_id: User ID

        Returns:
            Today's count before this request

        Raises:
            RateLimitExceeded: If the ceiling has been reached
        """
        now = self._clock()
        count = await self.get_daily_count(user_id, now)
        limit = self.settings.max_processing_per_day

        if count >= limit:
            logger.info("daily_limit_hit", user_id=user_id, count=count, limit=limit)
            raise RateLimitExceeded(
                f"Daily processing limit reached ({limit}).",
                retry_after=_seconds_until_next_day(now),
                limit="daily",
            )

        return count

    async def increment_daily_processing(self, user_id: str) -> int:
        """
        Charge one completed run to today's counter.

        Args:
            user_id: User ID

        Returns:
            Count after the increment
        """
        now = self._clock()
        path = DocumentPaths.daily_processing_count(user_id, utc_date_key(now))

        async def increment(transaction: Transaction) -> int:
            counter = await transaction.get(path)
            current = counter.get("count", 0)
            new_count = (current if isinstance(current, int) else 0) + 1
            transaction.set(path, {"count": new_count, "updatedAt": now}, merge=True)
            return new_count

        return await self.store.run_transaction(increment)

    def ensure_reprocess_allowed(self, thought: Thought) -> None:
        """
        Check the per-thought reprocess ceiling.

        Args:
            thought: Thought about to be reprocessed

        Raises:
            ResourceExhaustedError: If the thought has hit the ceiling
        """
        check_reprocess_ceiling(thought, self.settings.max_reprocess_count)
