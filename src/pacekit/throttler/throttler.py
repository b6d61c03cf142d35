"""Synchronous throttler.

Guarantees at most one execution per ``wait``. With ``leading`` the first
call of an open window runs immediately; with ``trailing`` the latest call
made while the window is closed runs as soon as it reopens.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pacekit.core.base import Pacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus

from .schemas import ThrottlerOptions, ThrottlerState


class Throttler(Pacer[ThrottlerOptions, ThrottlerState]):
    """Limit a function to one execution per window.

    Usage:
        throttler = Throttler(update_position, ThrottlerOptions(wait=0.1))
        throttler.maybe_execute(offset)
    """

    def __init__(self, fn: Callable[[Any], Any], options: ThrottlerOptions) -> None:
        super().__init__(fn, options, ThrottlerState())
        self._timer = Timer()

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
    def maybe_execute(self, args: Any = None) -> None:
        """Execute now, schedule a trailing execution, or drop the call.

        Args:
            args: Argument passed to the function
        """
        options = self._options
        if not options.enabled:
            return

        now = datetime.now(UTC)
        self._set_state(
            maybe_execute_count=self._state.maybe_execute_count + 1,
            last_args=args,
        )

        remaining = self.time_until_next(now)
        if remaining <= timedelta(0):
            if options.leading:
                self._timer.cancel()
                self._execute(args)
            elif options.trailing and not self._timer.active:
                self._schedule(options.wait, now)
        elif options.trailing:
            self._schedule(remaining, now)

    def flush(self) -> None:
        """Run the pending trailing execution now."""
        if not self._timer.active:
            return
        self._timer.cancel()
        self._execute(self._state.last_args)

    def cancel(self) -> None:
        """Discard the pending trailing execution."""
        self._timer.cancel()
        self._set_state(next_execution_time=None, status=self._resting_status())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _schedule(self, delay: timedelta, now: datetime) -> None:
        self._timer.start(delay.total_seconds(), self._on_timer)
        self._set_state(next_execution_time=now + delay, status=PacerStatus.PENDING)

    def _on_timer(self) -> None:
        self._execute(self._state.last_args)

    def _settled_changes(self) -> dict[str, Any]:
        if self._timer.active:
            return {"status": PacerStatus.PENDING}
        return {"status": self._resting_status(), "next_execution_time": None}

    def _execute(self, args: Any) -> None:
        self._set_state(
            last_execution_time=datetime.now(UTC),
            status=PacerStatus.EXECUTING,
        )
        try:
            self.fn(args)
        except Exception:
            self._set_state(**self._settled_changes())
            raise

        if self._options.on_execute:
            self._options.on_execute(args)
        self._set_state(
            execution_count=self._state.execution_count + 1,
            **self._settled_changes(),
        )

    def _on_disable(self) -> None:
        self._timer.cancel()
        self._update(next_execution_time=None)
