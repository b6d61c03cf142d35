"""Synchronous debouncer.

Delays execution until calls stop arriving for ``wait``. Intermediate
calls are coalesced: only the latest args reach the trailing execution.

Timeline (wait=50ms, trailing):
    calls:      a   b   c
    time(ms):   0   10  20 ........ 70
    executes:                       fn(c)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pacekit.core.base import Pacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus

from .schemas import DebouncerOptions, DebouncerState


class Debouncer(Pacer[DebouncerOptions, DebouncerState]):
    """Run a function once activity has stopped.

    Errors raised by the function propagate to the caller of
    ``maybe_execute``/``flush``; trailing executions report them to the
    event loop's exception handler.

    Usage:
        debouncer = Debouncer(save_draft, DebouncerOptions(wait=0.3))
        debouncer.maybe_execute(text)
    """

    def __init__(self, fn: Callable[[Any], Any], options: DebouncerOptions) -> None:
        super().__init__(fn, options, DebouncerState())
        self._timer = Timer()
        self._leading_used = False
        self._trailing_owed = False

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def maybe_execute(self, args: Any = None) -> None:
        """Register a call; execution happens on the leading or trailing edge.

        Args:
            args: Argument passed to the function
        """
        options = self._options
        if not options.enabled:
            return

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
            self._execute(args)
        else:
            self._trailing_owed = True

    def flush(self) -> None:
        """Run the pending trailing call now, if there is one."""
        if not (self._trailing_owed and self._options.trailing):
            return
        self._end_window()
        self._execute(self._state.last_args)

    def cancel(self) -> None:
        """Discard the pending call and end the quiet window."""
        self._end_window()
        self._set_state(is_pending=False, status=self._resting_status())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _end_window(self) -> None:
        self._timer.cancel()
        self._leading_used = False
        self._trailing_owed = False

    def _on_quiet(self) -> None:
        owed = self._trailing_owed and self._options.trailing
        self._leading_used = False
        self._trailing_owed = False
        if owed:
            self._execute(self._state.last_args)
        else:
            self._set_state(is_pending=False, status=self._resting_status())

    def _settled_status(self) -> PacerStatus:
        if self._timer.active:
            return PacerStatus.PENDING
        return self._resting_status()

    def _execute(self, args: Any) -> None:
        self._set_state(status=PacerStatus.EXECUTING)
        try:
            self.fn(args)
        except Exception:
            self._set_state(is_pending=self._timer.active, status=self._settled_status())
            raise

        if self._options.on_execute:
            self._options.on_execute(args)
        self._set_state(
            execution_count=self._state.execution_count + 1,
            is_pending=self._timer.active,
            status=self._settled_status(),
        )

    def _on_disable(self) -> None:
        self._end_window()
        self._update(is_pending=False)
