"""Debounce: run a function once calls stop arriving.

Components:
- Debouncer: Synchronous debouncer
- AsyncDebouncer: Coroutine debouncer with shared completions
"""

from .async_debouncer import AsyncDebouncer
from .debouncer import Debouncer
from .schemas import AsyncDebouncerOptions, AsyncDebouncerState, DebouncerOptions, DebouncerState

__all__ = [
    "AsyncDebouncer",
    "AsyncDebouncerOptions",
    "AsyncDebouncerState",
    "Debouncer",
    "DebouncerOptions",
    "DebouncerState",
]
