"""
Fixed-window rate limiting with an in-process backend and a Redis backend.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import redis

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimit:
    """Rate limit configuration."""
    max_requests: int  # Number of requests allowed per window
    window_ms: int     # Window length in milliseconds

    def __post_init__(self):
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be positive")


@dataclass(frozen=True)
class RateLimitStatus:
    """Result of one rate limit check."""
    allowed: bool
    remaining: int
    reset_time: int  # epoch milliseconds
    limit: int = 0

    def retry_after_seconds(self, current_ms: Optional[int] = None) -> int:
        """Whole seconds until the window resets, at least 1."""
        current_ms = now_ms() if current_ms is None else current_ms
        return max(1, -(-(self.reset_time - current_ms) // 1000))

    def to_headers(self) -> Dict[str, str]:
        """Convert to HTTP headers."""
        headers = {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
            'X-RateLimit-Reset': str(self.reset_time // 1000)
        }
        if not self.allowed:
            headers['Retry-After'] = str(self.retry_after_seconds())
        return headers


@dataclass
class _Window:
    count: int
    reset_time: int


class FixedWindowRateLimiter:
    """
    In-memory fixed window limiter.

    The first request from an identifier opens a window ending at
    ``now + window_ms``. Requests inside the window are counted; once the
    count reaches ``max_requests`` further requests are refused until the
    window has passed. Expired windows are purged on every call.
    """

    def __init__(self, rate_limit: RateLimit, clock: Callable[[], int] = now_ms):
        self.rate_limit = rate_limit
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check_limit(self, identifier: str) -> RateLimitStatus:
        """Count one request for ``identifier`` and report whether it is allowed."""
        limit = self.rate_limit
        with self._lock:
            now = self._clock()
            self._purge_expired(now)

            window = self._windows.get(identifier)
            if window is None:
                window = _Window(count=1, reset_time=now + limit.window_ms)
                self._windows[identifier] = window
                return RateLimitStatus(True, limit.max_requests - 1, window.reset_time, limit.max_requests)

            if window.count >= limit.max_requests:
                return RateLimitStatus(False, 0, window.reset_time, limit.max_requests)

            window.count += 1
            return RateLimitStatus(
                True,
                limit.max_requests - window.count,
                window.reset_time,
                limit.max_requests,
            )

    def reset(self, identifier: Optional[str] = None) -> None:
        """Forget one identifier's window, or all windows."""
        with self._lock:
            if identifier is None:
                self._windows.clear()
            else:
                self._windows.pop(identifier, None)

    def _purge_expired(self, now: int) -> None:
        expired = [key for key, window in self._windows.items() if now > window.reset_time]
        for key in expired:
            del self._windows[key]


class RedisRateLimiter:
    """
    Redis-backed fixed window limiter for deployments with several processes.
    The counter key expires with the window, so no explicit cleanup is needed.
    """

    def __init__(self, redis_client: redis.Redis, rate_limit: RateLimit, prefix: str,
                 clock: Callable[[], int] = now_ms):
        self.redis = redis_client
        self.rate_limit = rate_limit
        self.prefix = prefix
        self._clock = clock

    def check_limit(self, identifier: str) -> RateLimitStatus:
        """Count one request for ``identifier`` and report whether it is allowed."""
        limit = self.rate_limit
        key = f"rate_limit:{self.prefix}:{identifier}"
        now = self._clock()

        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.pexpire(key, limit.window_ms, nx=True)
        pipe.pttl(key)
        count, _, ttl = pipe.execute()

        reset_time = now + (ttl if ttl and ttl > 0 else limit.window_ms)

        if count > limit.max_requests:
            return RateLimitStatus(False, 0, reset_time, limit.max_requests)

        return RateLimitStatus(True, limit.max_requests - count, reset_time, limit.max_requests)

    def reset(self, identifier: Optional[str] = None) -> None:
        if identifier is None:
            for key in self.redis.scan_iter(f"rate_limit:{self.prefix}:*"):
                self.redis.delete(key)
        else:
            self.redis.delete(f"rate_limit:{self.prefix}:{identifier}")


# Predefined rate limits
DEFAULT_RATE_LIMITS = {
    'chat': RateLimit(max_requests=10, window_ms=60 * 1000),   # 10 chat messages per minute
    'api': RateLimit(max_requests=100, window_ms=60 * 1000),   # 100 requests per minute
}


class RateLimiterRegistry:
    """
    Named limiters built once at startup and injected where needed.
    Each name has its own counters.
    """

    def __init__(self, limits: Optional[Dict[str, RateLimit]] = None,
                 redis_url: Optional[str] = None,
                 clock: Callable[[], int] = now_ms,
                 enabled: bool = True):
        self.limits = dict(limits or DEFAULT_RATE_LIMITS)
        self.enabled = enabled
        self._clock = clock
        self._redis_client: Optional[redis.Redis] = None
        self._limiters: Dict[str, object] = {}
        self._lock = threading.Lock()

        if redis_url:
            try:
                client = redis.from_url(redis_url)
                client.ping()
                self._redis_client = client
                logger.info("Using Redis rate limiter")
            except redis.RedisError as e:
                logger.warning(f"Redis unavailable, using in-memory rate limiter: {e}")
        else:
            logger.info("Using in-memory rate limiter")

    def get(self, name: str):
        """Return the limiter registered under ``name``."""
        with self._lock:
            limiter = self._limiters.get(name)
            if limiter is None:
                try:
                    rate_limit = self.limits[name]
                except KeyError:
                    raise KeyError(f"Unknown rate limit: {name}")
                if self._redis_client is not None:
                    limiter = RedisRateLimiter(self._redis_client, rate_limit, name, self._clock)
                else:
                    limiter = FixedWindowRateLimiter(rate_limit, self._clock)
                self._limiters[name] = limiter
            return limiter

    def check_limit(self, name: str, identifier: str) -> RateLimitStatus:
        """Count one request against the named limit. Always allowed when disabled."""
        if not self.enabled:
            rate_limit = self.limits[name]
            return RateLimitStatus(True, rate_limit.max_requests, self._clock() + rate_limit.window_ms, rate_limit.max_requests)
        return self.get(name).check_limit(identifier)

    def reset(self) -> None:
        """Clear every limiter's counters."""
        with self._lock:
            limiters = list(self._limiters.values())
        for limiter in limiters:
            limiter.reset()
