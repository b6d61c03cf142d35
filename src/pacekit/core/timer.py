"""Single-handle event loop timer.

Every pacer owns its timers through this class. Arming a timer always
cancels the previous handle first, so a superseded callback can never fire.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any


class Timer:
    """A cancellable one-shot timer bound to the running event loop.

    Usage:
        timer = Timer()
        timer.start(0.3, on_quiet)   # fires on_quiet in 300ms
        timer.start(0.3, on_quiet)   # previous handle cancelled, re-armed
        timer.cancel()               # nothing fires
    """

    __slots__ = ("_deadline", "_handle", "_loop")

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._deadline: float | None = None

    def start(self, delay: float, callback: Callable[[], Any]) -> None:
        """Arm the timer, replacing any pending handle.

        Args:
            delay: Seconds until the callback fires (negative values fire ASAP)
            callback: Zero-argument callable invoked on the event loop

        Raises:
            RuntimeError: If called outside a running event loop
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        delay = max(0.0, delay)
        self._loop = loop
        self._deadline = loop.time() + delay
        self._handle = loop.call_later(delay, self._fire, callback)

    def cancel(self) -> bool:
        """Cancel the pending handle.

        Returns:
            True if a pending callback was cancelled
        """
        handle = self._handle
        self._handle = None
        self._deadline = None
        if handle is None:
            return False
        handle.cancel()
        return True

    def _fire(self, callback: Callable[[], Any]) -> None:
        self._handle = None
        self._deadline = None
        callback()

    @property
    def active(self) -> bool:
        """Whether a callback is pending."""
        return self._handle is not None

    @property
    def remaining(self) -> float:
        """Seconds until the pending callback fires (0 if inactive)."""
        if self._deadline is None or self._loop is None:
            return 0.0
        return max(0.0, self._deadline - self._loop.time())
