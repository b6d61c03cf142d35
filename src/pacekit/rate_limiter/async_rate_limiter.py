"""Asynchronous rate limiter."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.exceptions import PacerDisabledError

from .schemas import AsyncRateLimiterOptions, AsyncRateLimiterState
from .window import ms_until_next_window, prune, remaining_in_window, window_start


class AsyncRateLimiter(AsyncPacer[AsyncRateLimiterOptions, AsyncRateLimiterState]):
    """Window-based admission control for a coroutine function.

    Rejected calls return None immediately; they never raise.

    Usage:
        limiter = AsyncRateLimiter(fetch, AsyncRateLimiterOptions(limit=10, window=1))
        result = await limiter.maybe_execute(url)
    """

    def __init__(self, fn: Callable[[Any], Any], options: AsyncRateLimiterOptions) -> None:
        super().__init__(fn, options, AsyncRateLimiterState())

    async def maybe_execute(self, args: Any = None) -> Any:
        """Execute if the window has room.

        Args:
            args: Argument passed to the function

        Returns:
            Result of the execution, or None if rejected (or failed with
            throw_on_error False)

        Raises:
            PacerDisabledError: If the rate limiter is disabled
            PacerAbortedError: If the execution is aborted
        """
        options = self._options
        if not options.enabled:
            raise PacerDisabledError(self.name)

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
            return None

        self._update(
            maybe_execute_count=state.maybe_execute_count + 1,
            execution_times=(*times, now),
            is_exceeded=False,
        )
        future = self._new_future()
        self._spawn(self._run(args, future))
        return await self._wait_for(future)

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
            error_count=0,
            success_count=0,
            settle_count=0,
            execution_times=(),
            is_exceeded=False,
        )

    def abort(self) -> None:
        """Discard every execution in flight; waiting callers receive PacerAbortedError."""
        self._invalidate()
        self._set_state(is_executing=False, status=self._resting_status())
        self._logger.debug("Aborted")

    def _on_disable(self) -> None:
        self.abort()
