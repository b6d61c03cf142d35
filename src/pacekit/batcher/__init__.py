"""Batch: group items into one call by size, predicate or time.

Components:
- Batcher: Synchronous batcher
- AsyncBatcher: Coroutine batcher with per-batch completions
"""

from .async_batcher import AsyncBatcher
from .batcher import Batcher
from .schemas import AsyncBatcherOptions, AsyncBatcherState, BatcherOptions, BatcherState

__all__ = [
    "AsyncBatcher",
    "AsyncBatcherOptions",
    "AsyncBatcherState",
    "Batcher",
    "BatcherOptions",
    "BatcherState",
]
