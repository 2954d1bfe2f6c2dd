"""
Snapshot caching.
"""

from shared.cache.config import CacheSettings, get_cache_settings
from shared.cache.snapshot_cache import (
    CachedSnapshot,
    InMemorySnapshotCache,
    NullSnapshotCache,
    RedisSnapshotCache,
    SnapshotCache,
)


async def create_snapshot_cache(settings: CacheSettings | None = None) -> SnapshotCache:
    """
    Build the snapshot cache selected by ``backend``.

    Args:
        settings: Cache settings (uses cached settings if not provided)

    Returns:
        Snapshot cache instance
    """
    settings = settings or get_cache_settings()
    backend = settings.backend.lower()

    if backend == "none" or settings.snapshot_ttl_seconds == 0:
        return NullSnapshotCache()
    if backend == "redis":
        return await RedisSnapshotCache.connect(
            settings.redis_url,
            ttl_seconds=settings.snapshot_ttl_seconds,
            socket_timeout=settings.socket_timeout,
        )
    return InMemorySnapshotCache(ttl_seconds=settings.snapshot_ttl_seconds)


__all__ = [
    "SnapshotCache",
    "CachedSnapshot",
    "InMemorySnapshotCache",
    "NullSnapshotCache",
    "RedisSnapshotCache",
    "CacheSettings",
    "get_cache_settings",
    "create_snapshot_cache",
]
