"""Retry: re-run a failing coroutine function with backoff."""

from .retryer import AsyncRetryer, backoff_delay
from .schemas import AsyncRetryerOptions, AsyncRetryerState

__all__ = [
    "AsyncRetryer",
    "AsyncRetryerOptions",
    "AsyncRetryerState",
    "backoff_delay",
]
