"""
Per-user snapshot caches.

The entitlement gate reads subscription snapshots through one of these so
the cache can be swapped for Redis in production or disabled in tests. A
cached ``None`` (no subscription record) is a hit, distinct from a miss.
Entries are only ever invalidated by expiry.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from redis.asyncio import Redis

from shared.config.logging import get_logger
from shared.exceptions import CacheConnectionError
from shared.utils.datetime_utils import Clock, get_utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedSnapshot:
    """Cache hit wrapper; ``data`` is None when no record exists."""

    data: dict[str, Any] | None


class SnapshotCache(ABC):
    """Cache of raw snapshot documents keyed by user id."""

    @abstractmethod
    async def get(self, user_id: str) -> CachedSnapshot | None:
        """
        Look up a cached snapshot.

        Args:
            user_id: User ID

        Returns:
            Cache hit, or None on a miss or expired entry
        """
        pass

    @abstractmethod
    async def set(self, user_id: str, data: dict[str, Any] | None) -> None:
        """
        Cache a snapshot (or its absence) for the configured TTL.

        Args:
            user_id: User ID
            data: Snapshot document data, or None if there is no record
        """
        pass

    async def close(self) -> None:
        """Release cache resources."""
        return None


class NullSnapshotCache(SnapshotCache):
    """Cache that never hits."""

    async def get(self, user_id: str) -> CachedSnapshot | None:
        """Always miss."""
        return None

    async def set(self, user_id: str, data: dict[str, Any] | None) -> None:
        """Discard the value."""
        return None


class InMemorySnapshotCache(SnapshotCache):
    """Process-local TTL cache."""

    def __init__(self, ttl_seconds: float = 60.0, clock: Clock = get_utc_now):
        """
        Initialize cache.

        Args:
            ttl_seconds: Lifetime of each entry
            clock: Source of the current time
        """
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[dict[str, Any] | None, datetime]] = {}

    async def get(self, user_id: str) -> CachedSnapshot | None:
        """Return the entry if it has not expired."""
        entry = self._entries.get(user_id)
        if entry is None:
            return None

        data, expires_at = entry
        if expires_at <= self._clock():
            self._entries.pop(user_id, None)
            return None

        return CachedSnapshot(data=data)

    async def set(self, user_id: str, data: dict[str, Any] | None) -> None:
        """Store the entry with a fresh expiry."""
        self._entries[user_id] = (data, self._clock() + self.ttl)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RedisSnapshotCache(SnapshotCache):
    """Redis-backed cache shared between processes."""

    KEY_PREFIX = "subscription"
    SEPARATOR = ":"

    def __init__(self, client: Redis, ttl_seconds: int = 60):
        """
        Initialize cache.

        Args:
            client: Connected Redis client
            ttl_seconds: Lifetime of each entry
        """
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    async def connect(cls, url: str, ttl_seconds: int = 60, socket_timeout: float = 5.0) -> "RedisSnapshotCache":
        """
        Create a cache from a Redis URL and verify the connection.

        Args:
            url: Redis connection URL
            ttl_seconds: Lifetime of each entry
            socket_timeout: Socket timeout in seconds

        Returns:
            Connected cache

        Raises:
            CacheConnectionError: If Redis is unreachable
        """
        client = Redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)
        try:
            await client.ping()
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e), url=url)
            await client.aclose()
            raise CacheConnectionError(f"Failed to connect to Redis: {e}") from e

        logger.info("redis_connected", url=url)
        return cls(client, ttl_seconds=ttl_seconds)

    @classmethod
    def key(cls, user_id: str) -> str:
        """Cache key for a user's snapshot."""
        return f"{cls.KEY_PREFIX}{cls.SEPARATOR}{user_id}"

    async def get(self, user_id: str) -> CachedSnapshot | None:
        """Read through Redis; failures degrade to a miss."""
        try:
            raw = await self.client.get(self.key(user_id))
        except Exception as e:
            logger.warning("snapshot_cache_get_failed", user_id=user_id, error=str(e))
            return None

        if raw is None:
            return None

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("snapshot_cache_decode_failed", user_id=user_id, error=str(e))
            return None

        return CachedSnapshot(data=payload.get("snapshot"))

    async def set(self, user_id: str, data: dict[str, Any] | None) -> None:
        """Write through Redis with SETEX; failures are logged and ignored."""
        body = json.dumps({"snapshot": data}, default=_json_default)
        try:
            await self.client.setex(self.key(user_id), self.ttl_seconds, body)
        except Exception as e:
            logger.warning("snapshot_cache_set_failed", user_id=user_id, error=str(e))

    async def close(self) -> None:
        """Close the Redis connection."""
        await self.client.aclose()
