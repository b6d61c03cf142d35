"""Queue: buffer items and process them in order.

Components:
- Queuer: Synchronous queuer
- AsyncQueuer: Coroutine queuer with per-item completions and concurrency
- ItemBuffer: Ordered, priority-aware, expiring entry buffer
"""

from .async_queuer import AsyncQueuer
from .buffer import ItemBuffer, QueueEntry
from .queuer import Queuer
from .schemas import AsyncQueuerOptions, AsyncQueuerState, QueuerOptions, QueuerState

__all__ = [
    # Controllers
    "AsyncQueuer",
    "Queuer",
    # Options & state
    "AsyncQueuerOptions",
    "AsyncQueuerState",
    "QueuerOptions",
    "QueuerState",
    # Buffer
    "ItemBuffer",
    "QueueEntry",
]
