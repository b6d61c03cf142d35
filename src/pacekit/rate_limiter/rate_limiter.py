"""Synchronous rate limiter.

Admits at most ``limit`` executions per ``window``. Admission is decided at
call time; there is no internal timer.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pacekit.core.base import Pacer
from pacekit.enums import PacerStatus

from .schemas import RateLimiterOptions, RateLimiterState
from .window import ms_until_next_window, prune, remaining_in_window, window_start


class RateLimiter(Pacer[RateLimiterOptions, RateLimiterState]):
    """Window-based admission control for a function.

    Usage:
        limiter = RateLimiter(send, RateLimiterOptions(limit=5, window=60))
        if not limiter.maybe_execute(payload):
            wait_ms = limiter.get_ms_until_next_window()
    """

    def __init__(self, fn: Callable[[Any], Any], options: RateLimiterOptions) -> None:
        super().__init__(fn, options, RateLimiterState())

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def maybe_execute(self, args: Any = None) -> bool:
        """Execute if the window has room.

        Args:
            args: Argument passed to the function

        Returns:
            True if the call was admitted, False if rejected or disabled
        """
        options = self._options
        if not options.enabled:
            return False

        now = datetime.now(UTC)
        state = self._state
        times = prune(
            state.execution_times,
            window_start(state.execution_times, now, options.window, options.window_type),
        )

        if len(times) >= options.limit:
            if options.on_reject:
                options.on_reject(args)
            self._set_state(
                maybe_execute_count=state.maybe_execute_count + 1,
                rejection_count=state.rejection_count + 1,
                execution_times=times,
                is_exceeded=True,
            )
            self._logger.debug("Rejected: {} executions in window", len(times))
            return False

        self._set_state(
            maybe_execute_count=state.maybe_execute_count + 1,
            execution_times=(*times, now),
            is_exceeded=False,
            status=PacerStatus.EXECUTING,
        )
        try:
            self.fn(args)
        except Exception:
            self._set_state(status=self._resting_status())
            raise

        if options.on_execute:
            options.on_execute(args)
        self._set_state(
            execution_count=self._state.execution_count + 1,
            status=self._resting_status(),
        )
        return True

    def get_remaining_in_window(self) -> int:
        """Executions still admissible in the current window."""
        return remaining_in_window(
            self._state.execution_times,
            datetime.now(UTC),
            self._options.window,
            self._options.limit,
        )

    def get_ms_until_next_window(self) -> int:
        """Milliseconds until the oldest relevant execution leaves the window."""
        return ms_until_next_window(
            self._state.execution_times,
            datetime.now(UTC),
            self._options.window,
            self._options.window_type,
        )

    def reset(self) -> None:
        """Forget the admission history and zero the counters."""
        self._set_state(
            execution_count=0,
            maybe_execute_count=0,
            rejection_count=0,
            execution_times=(),
            is_exceeded=False,
            status=self._resting_status(),
        )
