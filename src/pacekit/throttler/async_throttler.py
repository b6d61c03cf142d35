"""Asynchronous throttler.

A call that lands inside a closed window is refused with ThrottledError,
which carries ``retry_after``. When ``trailing`` is set the refused call
still (re)schedules the trailing execution; its outcome is visible through
the state and the result hooks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus
from pacekit.exceptions import PacerDisabledError, ThrottledError

from .schemas import AsyncThrottlerOptions, AsyncThrottlerState


class AsyncThrottler(AsyncPacer[AsyncThrottlerOptions, AsyncThrottlerState]):
    """Throttle a coroutine function.

    Usage:
        throttler = AsyncThrottler(refresh, AsyncThrottlerOptions(wait=1))
        try:
            data = await throttler.maybe_execute(query)
        except ThrottledError as e:
            print(f"retry in {e.retry_after:.2f}s")
    """

    def __init__(self, fn: Callable[[Any], Any], options: AsyncThrottlerOptions) -> None:
        super().__init__(fn, options, AsyncThrottlerState())
        self._timer = Timer()
        self._trailing_future: asyncio.Future[Any] | None = None

    def time_until_next(self, now: datetime | None = None) -> timedelta:
        """Time until the window reopens (zero when it is open)."""
        last = self._state.last_execution_time
        if last is None:
            return timedelta(0)
        now = now or datetime.now(UTC)
        return max(timedelta(0), self._options.wait - (now - last))

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    async def maybe_execute(self, args: Any = None) -> Any:
        """Execute now or wait for the trailing execution of this window.

        Args:
            args: Argument passed to the function

        Returns:
            Result of the execution (None if it failed and throw_on_error
            is False)

        Raises:
            PacerDisabledError: If the throttler is disabled
            ThrottledError: If the window is closed
            PacerAbortedError: If the pending execution is aborted
        """
        options = self._options
        if not options.enabled:
            raise PacerDisabledError(self.name)

        now = datetime.now(UTC)
        self._set_state(
            maybe_execute_count=self._state.maybe_execute_count + 1,
            last_args=args,
        )

        remaining = self.time_until_next(now)
        if remaining <= timedelta(0):
            if options.leading:
                self._timer.cancel()
                future = self._start(args, self._new_future())
                return await self._wait_for(future)
            if options.trailing:
                if not self._timer.active:
                    self._schedule(options.wait, now)
                if self._trailing_future is None:
                    self._trailing_future = self._new_future()
                return await self._wait_for(self._trailing_future)
            raise ThrottledError(f"{self.name} has neither leading nor trailing edge")

        if options.trailing:
            self._schedule(remaining, now)
        self._logger.debug("Throttled, retry after {:.3f}s", remaining.total_seconds())
        raise ThrottledError(f"{self.name} throttled", retry_after=remaining.total_seconds())

    async def flush(self) -> Any:
        """Run the pending trailing execution now and return its result."""
        if not self._timer.active:
            return None
        self._timer.cancel()
        future = self._fire()
        return await self._wait_for(future)

    def abort(self) -> None:
        """Discard the trailing execution and any execution in flight."""
        self._timer.cancel()
        future, self._trailing_future = self._trailing_future, None
        self._reject(future, self._aborted_error())
        self._invalidate()
        self._set_state(
            next_execution_time=None,
            is_executing=False,
            status=self._resting_status(),
        )
        self._logger.debug("Aborted")

    def cancel(self) -> None:
        """Alias of abort()."""
        self.abort()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _schedule(self, delay: timedelta, now: datetime) -> None:
        self._timer.start(delay.total_seconds(), self._fire)
        self._set_state(next_execution_time=now + delay, status=PacerStatus.PENDING)

    def _fire(self) -> asyncio.Future[Any]:
        future, self._trailing_future = self._trailing_future, None
        return self._start(self._state.last_args, future or self._new_future())

    def _start(self, args: Any, future: asyncio.Future[Any]) -> asyncio.Future[Any]:
        # Only reached with the timer idle, so no execution is scheduled
        self._update(
            last_execution_time=datetime.now(UTC),
            next_execution_time=None,
            is_executing=True,
            status=PacerStatus.EXECUTING,
        )
        self._spawn(self._run(args, future))
        return future

    def _after_run_changes(self) -> dict[str, Any]:
        if self._timer.active:
            return {"status": PacerStatus.PENDING}
        return {"status": self._resting_status(), "next_execution_time": None}

    def _on_disable(self) -> None:
        self.abort()
