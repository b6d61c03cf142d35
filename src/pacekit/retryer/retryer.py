"""Retry a coroutine function with backoff.

Delay before attempt n+1 (n = failed attempts so far):
- exponential: base_wait * 2^(n-1)
- linear:      base_wait * n
- fixed:       base_wait
plus a uniform random jitter in [0, jitter].
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.enums import BackoffType, PacerStatus
from pacekit.exceptions import PacerDisabledError

from .schemas import AsyncRetryerOptions, AsyncRetryerState


def backoff_delay(options: AsyncRetryerOptions, attempt: int) -> float:
    """Seconds to wait after the given failed attempt (1-based)."""
    base = options.base_wait.total_seconds()
    if options.backoff == BackoffType.EXPONENTIAL:
        delay = base * 2 ** (attempt - 1)
    elif options.backoff == BackoffType.LINEAR:
        delay = base * attempt
    else:
        delay = base

    if options.jitter:
        delay += random.uniform(0, options.jitter.total_seconds())
    return delay


class AsyncRetryer(AsyncPacer[AsyncRetryerOptions, AsyncRetryerState]):
    """Run a coroutine function until it succeeds or attempts run out.

    One attempt sequence is active at a time: calling ``execute`` while a
    sequence is running aborts it first.

    Usage:
        retryer = AsyncRetryer(fetch, AsyncRetryerOptions(max_attempts=5, jitter=0.05))
        data = await retryer.execute(url)
    """

    def __init__(self, fn: Callable[[Any], Any], options: AsyncRetryerOptions) -> None:
        super().__init__(fn, options, AsyncRetryerState())
        self._sequence: asyncio.Task[Any] | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    async def execute(self, args: Any = None) -> Any:
        """Run the function, retrying failures with backoff.

        Args:
            args: Argument passed to the function on every attempt

        Returns:
            The first successful result, or None if every attempt failed
            and throw_on_error is False

        Raises:
            PacerDisabledError: If the retryer is disabled
            PacerAbortedError: If the sequence is aborted
            Exception: The last attempt's error when throw_on_error is True
        """
        if not self._options.enabled:
            raise PacerDisabledError(self.name)
        if self._sequence is not None:
            self._logger.debug("New execution supersedes the running sequence")
            self.abort()

        future = self._new_future()
        self._in_flight.add(future)
        self._sequence = self._spawn(self._attempts(args, future))
        return await self._wait_for(future)

    def abort(self) -> None:
        """Cancel the running sequence; its caller receives PacerAbortedError.

        Calling abort() with no sequence running does nothing.
        """
        task, self._sequence = self._sequence, None
        if task is None:
            return

        task.cancel()
        self._invalidate()
        if self._options.on_abort:
            self._options.on_abort()
        self._set_state(is_executing=False, status=self._resting_status())
        self._logger.info("Aborted at attempt {}", self._state.current_attempt)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    async def _attempt(self, args: Any) -> Any:
        timeout = self._options.max_execution_time
        if timeout is None:
            return await self._call(args)
        return await asyncio.wait_for(self._call(args), timeout.total_seconds())

    async def _attempts(self, args: Any, future: asyncio.Future[Any]) -> None:
        options = self._options
        loop = asyncio.get_running_loop()
        started = loop.time()
        self._set_state(
            current_attempt=0,
            is_executing=True,
            last_execution_time=datetime.now(UTC),
            status=PacerStatus.EXECUTING,
        )

        last_error: BaseException | None = None
        try:
            for attempt in range(1, options.max_attempts + 1):
                self._set_state(
                    current_attempt=attempt,
                    attempt_count=self._state.attempt_count + 1,
                )
                try:
                    result = await self._attempt(args)
                except Exception as error:
                    last_error = error
                    self._logger.warning(
                        "Attempt {}/{} failed: {!r}", attempt, options.max_attempts, error
                    )
                    if options.on_error:
                        options.on_error(error)
                    self._set_state(
                        error_count=self._state.error_count + 1,
                        last_error=error,
                    )

                    if attempt >= options.max_attempts:
                        break
                    delay = backoff_delay(options, attempt)
                    budget = options.max_total_execution_time
                    if budget is not None and loop.time() - started + delay > budget.total_seconds():
                        self._logger.debug("Retry budget exhausted after attempt {}", attempt)
                        break

                    if options.on_retry:
                        options.on_retry(attempt, error)
                    self._logger.debug("Retrying in {:.3f}s", delay)
                    await asyncio.sleep(delay)
                    continue

                if options.on_success:
                    options.on_success(result)
                self._update(
                    execution_count=self._state.execution_count + 1,
                    success_count=self._state.success_count + 1,
                    settle_count=self._state.settle_count + 1,
                    last_result=result,
                    is_executing=False,
                    total_execution_time=timedelta(seconds=loop.time() - started),
                    status=self._resting_status(),
                )
                if options.on_settled:
                    options.on_settled(result, None)
                self._notify()
                self._resolve(future, result)
                return

            self._update(
                settle_count=self._state.settle_count + 1,
                is_executing=False,
                total_execution_time=timedelta(seconds=loop.time() - started),
                status=self._resting_status(),
            )
            if options.on_settled:
                options.on_settled(None, last_error)
            self._notify()
            self._logger.warning("Giving up after {} attempts", self._state.current_attempt)

            if options.throw_on_error and last_error is not None:
                self._reject(future, last_error)
            else:
                self._resolve(future, None)
        finally:
            self._in_flight.discard(future)
            if self._sequence is asyncio.current_task():
                self._sequence = None

    def _on_disable(self) -> None:
        self.abort()
