"""Throttle: at most one execution per window.

Components:
- Throttler: Synchronous throttler (drops or defers calls)
- AsyncThrottler: Coroutine throttler (refuses closed-window calls with ThrottledError)
"""

from .async_throttler import AsyncThrottler
from .schemas import AsyncThrottlerOptions, AsyncThrottlerState, ThrottlerOptions, ThrottlerState
from .throttler import Throttler

__all__ = [
    "AsyncThrottler",
    "AsyncThrottlerOptions",
    "AsyncThrottlerState",
    "Throttler",
    "ThrottlerOptions",
    "ThrottlerState",
]
