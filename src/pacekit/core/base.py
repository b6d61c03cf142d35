"""Base contracts shared by every pacer.

- PacerOptions: immutable, validated configuration (pydantic)
- PacerState / AsyncPacerState: immutable snapshots replaced on every change
- Pacer: listener registry and state replacement
- AsyncPacer: task, future and abort bookkeeping for coroutine pacers
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Annotated, Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from pacekit.config import get_settings
from pacekit.enums import PacerStatus
from pacekit.exceptions import PacerAbortedError
from pacekit.logging import bind_pacer

# Listener receives the new state snapshot after every replacement
StateListener = Callable[[Any], None]

# Hook signatures
ArgsHook = Callable[[Any], Any]
ResultHook = Callable[[Any], Any]
ErrorHook = Callable[[BaseException], Any]
SettledHook = Callable[[Any, BaseException | None], Any]

# Validated durations (plain numbers are read as seconds)
Duration = Annotated[timedelta, Field(ge=timedelta(0))]
PositiveDuration = Annotated[timedelta, Field(gt=timedelta(0))]


class PacerOptions(BaseModel):
    """Configuration common to all pacers.

    Options are frozen; replace them wholesale with ``set_options``.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    enabled: bool = Field(
        default=True,
        description="Whether the pacer processes triggers",
    )
    key: str | None = Field(
        default=None,
        description="Optional identifier, bound into log records",
    )

    def with_changes(self, **changes: Any) -> Self:
        """Return a validated copy with the given fields replaced."""
        return type(self)(**{**dict(self), **changes})


class AsyncPacerOptions(PacerOptions):
    """Result hooks shared by the coroutine pacers."""

    on_success: ResultHook | None = Field(
        default=None,
        description="Called with the result of each successful execution",
    )
    on_error: ErrorHook | None = Field(
        default=None,
        description="Called with the error of each failed execution",
    )
    on_settled: SettledHook | None = Field(
        default=None,
        description="Called with (result, error) after every execution",
    )
    throw_on_error: bool = Field(
        default=False,
        description="Propagate function errors to the awaiting caller",
    )


@dataclass(frozen=True, kw_only=True)
class PacerState:
    """State common to all pacers."""

    execution_count: int = 0
    status: PacerStatus = PacerStatus.IDLE


@dataclass(frozen=True, kw_only=True)
class AsyncPacerState(PacerState):
    """Execution counters shared by the coroutine pacers."""

    error_count: int = 0
    success_count: int = 0
    settle_count: int = 0
    is_executing: bool = False
    last_result: Any = None


OptionsT = TypeVar("OptionsT", bound=PacerOptions)
StateT = TypeVar("StateT", bound=PacerState)


class Pacer(Generic[OptionsT, StateT]):
    """Base controller: owns options, the current state and its listeners.

    Usage:
        unsubscribe = pacer.subscribe(lambda state: print(state.status))
        ...
        unsubscribe()
    """

    def __init__(self, fn: Callable[[Any], Any], options: OptionsT, state: StateT) -> None:
        """Initialize the pacer.

        Args:
            fn: Wrapped function
            options: Initial options
            state: Initial state snapshot
        """
        self.fn = fn
        self._options = options
        self._state = state
        self._listeners: list[StateListener] = []
        self._logger = bind_pacer(self.name, options.key)
        self._trace_state = get_settings().trace_state_changes

        if not options.enabled:
            self._state = replace(self._state, status=PacerStatus.DISABLED)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------
    @property
    def name(self) -> str:
        """Controller class name, used in logs and errors."""
        return type(self).__name__

    @property
    def options(self) -> OptionsT:
        """Current options."""
        return self._options

    @property
    def state(self) -> StateT:
        """Current state snapshot."""
        return self._state

    # -------------------------------------------------------------------------
    # Change Notification
    # -------------------------------------------------------------------------
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with the new state after every change.

        Args:
            listener: Function receiving the state snapshot

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        """Notify all registered listeners."""
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                self._logger.warning("State listener error: {}", e)

    def _update(self, **changes: Any) -> None:
        """Replace the state snapshot without notifying."""
        self._state = replace(self._state, **changes)
        if self._trace_state:
            self._logger.trace("State changed: {}", self._state)

    def _set_state(self, **changes: Any) -> None:
        """Replace the state snapshot and notify listeners."""
        self._update(**changes)
        self._notify()

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------
    def set_options(self, options: OptionsT) -> None:
        """Replace the options.

        Disabling cancels pending work and sets the status to DISABLED.
        Re-enabling restores the resting status.

        Args:
            options: New options (full replacement, not a merge)
        """
        self._options = options
        self._logger = bind_pacer(self.name, options.key)

        if not options.enabled:
            self._on_disable()
            self._set_state(status=PacerStatus.DISABLED)
        elif self._state.status == PacerStatus.DISABLED:
            self._set_state(status=self._resting_status())
        else:
            self._notify()

    def _on_disable(self) -> None:
        """Cancel pending work when the pacer is disabled."""

    def _resting_status(self) -> PacerStatus:
        """Status to report when nothing is scheduled or executing."""
        if not self._options.enabled:
            return PacerStatus.DISABLED
        return PacerStatus.IDLE

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------
    def dispose(self) -> None:
        """Cancel pending work and drop all listeners.

        No hook or listener fires after dispose() returns.
        """
        self._listeners.clear()
        self._on_disable()
        self._logger.debug("Disposed")


def _retrieve_exception(future: asyncio.Future[Any]) -> None:
    # Completions may be fire-and-forget; mark exceptions as retrieved.
    if not future.cancelled():
        future.exception()


class AsyncPacer(Pacer[OptionsT, StateT]):
    """Base for coroutine pacers.

    Executions run as tasks referenced by the pacer until done. Each
    ``abort`` bumps a generation counter; executions started under an older
    generation discard their outcome, so a late result never overwrites an
    abort rejection.
    """

    def __init__(self, fn: Callable[[Any], Any], options: OptionsT, state: StateT) -> None:
        super().__init__(fn, options, state)
        self._generation = 0
        self._running = 0
        self._tasks: set[asyncio.Task[Any]] = set()  # Prevent task GC
        self._in_flight: set[asyncio.Future[Any]] = set()

    # -------------------------------------------------------------------------
    # Task & Future Helpers
    # -------------------------------------------------------------------------
    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run a coroutine as a task owned by this pacer."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _new_future() -> asyncio.Future[Any]:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        future.add_done_callback(_retrieve_exception)
        return future

    @staticmethod
    def _resolve(future: asyncio.Future[Any] | None, result: Any) -> None:
        if future is not None and not future.done():
            future.set_result(result)

    @staticmethod
    def _reject(future: asyncio.Future[Any] | None, error: BaseException) -> None:
        if future is not None and not future.done():
            future.set_exception(error)

    @staticmethod
    async def _wait_for(future: asyncio.Future[Any]) -> Any:
        """Await a shared completion without letting caller cancellation cancel it."""
        return await asyncio.shield(future)

    def _aborted_error(self, message: str = "aborted") -> PacerAbortedError:
        return PacerAbortedError(self.name, message)

    async def _call(self, args: Any) -> Any:
        """Invoke the wrapped function, awaiting it when it is a coroutine."""
        result = self.fn(args)
        if inspect.isawaitable(result):
            result = await result
        return result

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------
    def _invalidate(self) -> None:
        """Discard every execution in flight and reject its completion."""
        self._generation += 1
        self._running = 0
        in_flight, self._in_flight = self._in_flight, set()
        for future in in_flight:
            self._reject(future, self._aborted_error())

    def _after_run_changes(self) -> dict[str, Any]:
        """State changes applied when an execution settles."""
        return {"status": self._resting_status()}

    async def _run(
        self,
        args: Any,
        future: asyncio.Future[Any] | None,
        *,
        call: Callable[[], Awaitable[Any]] | None = None,
        success_changes: Callable[[Any], dict[str, Any]] | None = None,
        error_changes: Callable[[BaseException], dict[str, Any]] | None = None,
        error_result: Any = None,
    ) -> None:
        """Execute once, update counters, fire hooks and settle the future.

        Hook order: on_execute/on_error, on_success, state replacement,
        on_settled, listener notification, future resolution.

        Args:
            args: Argument passed to the function and the on_execute hook
            future: Completion to settle (None when nobody awaits it)
            call: Override for invoking the function (defaults to fn(args))
            success_changes: Extra state changes on success
            error_changes: Extra state changes on failure
            error_result: Result delivered when throw_on_error is False
        """
        generation = self._generation
        if future is not None:
            self._in_flight.add(future)
        self._running += 1
        self._set_state(is_executing=True, status=PacerStatus.EXECUTING)

        options: Any = self._options
        try:
            result = await (call() if call is not None else self._call(args))
        except Exception as error:
            if generation != self._generation:
                self._logger.debug("Discarding error from aborted execution: {}", error)
                return
            self._running -= 1
            self._in_flight.discard(future)  # type: ignore[arg-type]
            self._logger.warning("Execution failed: {!r}", error)

            if options.on_error:
                options.on_error(error)
            state: Any = self._state
            self._update(
                error_count=state.error_count + 1,
                settle_count=state.settle_count + 1,
                is_executing=self._running > 0,
                **(self._after_run_changes() if self._running == 0 else {}),
                **(error_changes(error) if error_changes else {}),
            )
            if options.on_settled:
                options.on_settled(None, error)
            self._notify()

            if options.throw_on_error:
                self._reject(future, error)
            else:
                self._resolve(future, error_result)
        else:
            if generation != self._generation:
                self._logger.debug("Discarding result from aborted execution")
                return
            self._running -= 1
            self._in_flight.discard(future)  # type: ignore[arg-type]

            if getattr(options, "on_execute", None):
                options.on_execute(args)
            if options.on_success:
                options.on_success(result)
            state = self._state
            self._update(
                execution_count=state.execution_count + 1,
                success_count=state.success_count + 1,
                settle_count=state.settle_count + 1,
                last_result=result,
                is_executing=self._running > 0,
                **(self._after_run_changes() if self._running == 0 else {}),
                **(success_changes(result) if success_changes else {}),
            )
            if options.on_settled:
                options.on_settled(result, None)
            self._notify()

            self._resolve(future, result)
