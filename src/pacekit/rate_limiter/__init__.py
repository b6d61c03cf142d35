"""Rate limit: at most ``limit`` executions per window.

Components:
- RateLimiter: Synchronous limiter returning admission as a bool
- AsyncRateLimiter: Coroutine limiter returning the result or None
- window: Pure window arithmetic shared by both
"""

from .async_rate_limiter import AsyncRateLimiter
from .rate_limiter import RateLimiter
from .schemas import (
    AsyncRateLimiterOptions,
    AsyncRateLimiterState,
    RateLimiterOptions,
    RateLimiterState,
)

__all__ = [
    "AsyncRateLimiter",
    "AsyncRateLimiterOptions",
    "AsyncRateLimiterState",
    "RateLimiter",
    "RateLimiterOptions",
    "RateLimiterState",
]
