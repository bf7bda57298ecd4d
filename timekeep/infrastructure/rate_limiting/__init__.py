"""
Fixed-window rate limiting for the API and the chat assistant.
"""

from .limiter import (
    RateLimit, RateLimitStatus, FixedWindowRateLimiter, RedisRateLimiter,
    RateLimiterRegistry, DEFAULT_RATE_LIMITS, now_ms,
)

__all__ = [
    # Core classes
    'RateLimit',
    'RateLimitStatus',
    'FixedWindowRateLimiter',
    'RedisRateLimiter',
    'RateLimiterRegistry',

    # Predefined limits
    'DEFAULT_RATE_LIMITS',

    'now_ms',
]
