"""
Per-user processing rate limits.
"""

from shared.exceptions import RateLimitExceeded
from shared.rate_limiter.config import RateLimiterSettings, get_rate_limiter_settings
from shared.rate_limiter.limiter import INTERVAL_LIMIT_MESSAGE, ProcessingRateLimiter

__all__ = [
    "ProcessingRateLimiter",
    "RateLimitExceeded",
    "INTERVAL_LIMIT_MESSAGE",
    "RateLimiterSettings",
    "get_rate_limiter_settings",
]
