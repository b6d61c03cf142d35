"""Asynchronous debouncer.

Every call made before an execution starts shares one pending completion.
When the execution starts it takes ownership of that completion, so callers
arriving afterwards wait for the next execution instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus
from pacekit.exceptions import PacerDisabledError

from .schemas import AsyncDebouncerOptions, AsyncDebouncerState


class AsyncDebouncer(AsyncPacer[AsyncDebouncerOptions, AsyncDebouncerState]):
    """Debounce a coroutine function and deliver its result to every caller.

    Usage:
        debouncer = AsyncDebouncer(search, AsyncDebouncerOptions(wait=0.3))
        results = await debouncer.maybe_execute("pyth")
    """

    def __init__(self, fn: Callable[[Any], Any], options: AsyncDebouncerOptions) -> None:
        super().__init__(fn, options, AsyncDebouncerState())
        self._timer = Timer()
        self._leading_used = False
        self._trailing_owed = False
        self._pending_future: asyncio.Future[Any] | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    async def maybe_execute(self, args: Any = None) -> Any:
        """Register a call and wait for the execution it is coalesced into.

        Args:
            args: Argument passed to the function

        Returns:
            Result of the execution, or None if the window ended without one
            (or the function failed and throw_on_error is False)

        Raises:
            PacerDisabledError: If the debouncer is disabled
            PacerAbortedError: If the pending call is aborted
        """
        options = self._options
        if not options.enabled:
            raise PacerDisabledError(self.name)

        if self._pending_future is None:
            self._pending_future = self._new_future()
        future = self._pending_future

        self._timer.cancel()
        self._set_state(
            maybe_execute_count=self._state.maybe_execute_count + 1,
            last_args=args,
            is_pending=True,
            status=PacerStatus.PENDING,
        )

        self._timer.start(options.wait.total_seconds(), self._on_quiet)
        if options.leading and not self._leading_used:
            self._leading_used = True
            self._start(args)
        else:
            self._trailing_owed = True

        return await self._wait_for(future)

    async def flush(self) -> Any:
        """Run the pending trailing call now and return its result.

        Returns:
            Result of the execution, or None if nothing was pending
        """
        if not (self._trailing_owed and self._options.trailing):
            return None
        self._end_window()
        future = self._start(self._state.last_args)
        return await self._wait_for(future)

    def abort(self) -> None:
        """Drop the pending call and discard any execution in flight.

        Waiting callers receive PacerAbortedError.
        """
        self._end_window()
        future, self._pending_future = self._pending_future, None
        self._reject(future, self._aborted_error())
        self._invalidate()
        self._set_state(is_pending=False, is_executing=False, status=self._resting_status())
        self._logger.debug("Aborted")

    def cancel(self) -> None:
        """Alias of abort()."""
        self.abort()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _start(self, args: Any) -> asyncio.Future[Any]:
        """Take ownership of the pending completion and run fn in a task."""
        future, self._pending_future = self._pending_future, None
        if future is None:
            future = self._new_future()
        self._update(
            is_pending=self._timer.active,
            is_executing=True,
            status=PacerStatus.EXECUTING,
        )
        self._spawn(self._run(args, future))
        return future

    def _end_window(self) -> None:
        self._timer.cancel()
        self._leading_used = False
        self._trailing_owed = False

    def _on_quiet(self) -> None:
        owed = self._trailing_owed and self._options.trailing
        self._leading_used = False
        self._trailing_owed = False
        if owed:
            self._start(self._state.last_args)
            return

        future, self._pending_future = self._pending_future, None
        status = PacerStatus.EXECUTING if self._running else self._resting_status()
        self._set_state(is_pending=False, status=status)
        self._resolve(future, None)

    def _after_run_changes(self) -> dict[str, Any]:
        if self._timer.active:
            return {"status": PacerStatus.PENDING, "is_pending": True}
        return {"status": self._resting_status(), "is_pending": False}

    def _on_disable(self) -> None:
        self.abort()
