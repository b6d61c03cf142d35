"""Execution pacing primitives: debounce, throttle, rate-limit, queue, batch and retry.

Every controller wraps a function (plain or coroutine), holds frozen options
and an immutable state snapshot, and notifies subscribers on every change.
"""

from pacekit.batcher import AsyncBatcher, AsyncBatcherOptions, AsyncBatcherState, Batcher, BatcherOptions, BatcherState
from pacekit.core import AsyncPacer, AsyncPacerOptions, AsyncPacerState, Pacer, PacerOptions, PacerState
from pacekit.debouncer import (
    AsyncDebouncer,
    AsyncDebouncerOptions,
    AsyncDebouncerState,
    Debouncer,
    DebouncerOptions,
    DebouncerState,
)
from pacekit.enums import BackoffType, PacerStatus, QueuePosition, WindowType
from pacekit.exceptions import PacerAbortedError, PacerDisabledError, PacerError, ThrottledError
from pacekit.functions import (
    async_batch,
    async_debounce,
    async_queue,
    async_rate_limit,
    async_retry,
    async_throttle,
    batch,
    debounce,
    queue,
    rate_limit,
    throttle,
)
from pacekit.queuer import AsyncQueuer, AsyncQueuerOptions, AsyncQueuerState, Queuer, QueuerOptions, QueuerState
from pacekit.rate_limiter import (
    AsyncRateLimiter,
    AsyncRateLimiterOptions,
    AsyncRateLimiterState,
    RateLimiter,
    RateLimiterOptions,
    RateLimiterState,
)
from pacekit.retryer import AsyncRetryer, AsyncRetryerOptions, AsyncRetryerState
from pacekit.throttler import (
    AsyncThrottler,
    AsyncThrottlerOptions,
    AsyncThrottlerState,
    Throttler,
    ThrottlerOptions,
    ThrottlerState,
)

__version__ = "0.1.0"

__all__ = [
    # Base
    "AsyncPacer",
    "AsyncPacerOptions",
    "AsyncPacerState",
    "Pacer",
    "PacerOptions",
    "PacerState",
    # Enums
    "BackoffType",
    "PacerStatus",
    "QueuePosition",
    "WindowType",
    # Exceptions
    "PacerAbortedError",
    "PacerDisabledError",
    "PacerError",
    "ThrottledError",
    # Debounce
    "AsyncDebouncer",
    "AsyncDebouncerOptions",
    "AsyncDebouncerState",
    "Debouncer",
    "DebouncerOptions",
    "DebouncerState",
    # Throttle
    "AsyncThrottler",
    "AsyncThrottlerOptions",
    "AsyncThrottlerState",
    "Throttler",
    "ThrottlerOptions",
    "ThrottlerState",
    # Rate limit
    "AsyncRateLimiter",
    "AsyncRateLimiterOptions",
    "AsyncRateLimiterState",
    "RateLimiter",
    "RateLimiterOptions",
    "RateLimiterState",
    # Queue
    "AsyncQueuer",
    "AsyncQueuerOptions",
    "AsyncQueuerState",
    "Queuer",
    "QueuerOptions",
    "QueuerState",
    # Batch
    "AsyncBatcher",
    "AsyncBatcherOptions",
    "AsyncBatcherState",
    "Batcher",
    "BatcherOptions",
    "BatcherState",
    # Retry
    "AsyncRetryer",
    "AsyncRetryerOptions",
    "AsyncRetryerState",
    # Convenience constructors
    "async_batch",
    "async_debounce",
    "async_queue",
    "async_rate_limit",
    "async_retry",
    "async_throttle",
    "batch",
    "debounce",
    "queue",
    "rate_limit",
    "throttle",
]
