"""Unit tests for the synchronous Debouncer.

The debouncer arms event loop timers, so tests run inside a loop.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from pacekit.debouncer import Debouncer, DebouncerOptions
from pacekit.enums import PacerStatus

WAIT = 0.05
SETTLE = 0.1


class TestDebounceCoalescing:
    """Tests for trailing-edge coalescing."""

    @pytest.mark.asyncio
    async def test_rapid_calls_execute_once_with_latest_args(self, calls) -> None:
        """Calls at 0/10/20ms collapse into one execution with the last args."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))

        debouncer.maybe_execute("a")
        await asyncio.sleep(0.01)
        debouncer.maybe_execute("b")
        await asyncio.sleep(0.01)
        debouncer.maybe_execute("c")

        assert calls.calls == []
        await asyncio.sleep(SETTLE)

        assert calls.calls == ["c"]
        assert debouncer.state.execution_count == 1
        assert debouncer.state.maybe_execute_count == 3

    @pytest.mark.asyncio
    async def test_state_while_pending(self, calls) -> None:
        """A registered call leaves the debouncer pending."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))

        debouncer.maybe_execute("x")

        assert debouncer.state.status == PacerStatus.PENDING
        assert debouncer.state.is_pending is True
        assert debouncer.state.last_args == "x"

        await asyncio.sleep(SETTLE)
        assert debouncer.state.status == PacerStatus.IDLE
        assert debouncer.state.is_pending is False

    @pytest.mark.asyncio
    async def test_each_call_restarts_the_window(self, calls) -> None:
        """Execution waits for a full quiet period after the last call."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))

        for _ in range(4):
            debouncer.maybe_execute("x")
            await asyncio.sleep(0.03)
        assert calls.calls == []

        await asyncio.sleep(SETTLE)
        assert calls.calls == ["x"]


class TestLeadingEdge:
    """Tests for leading-edge execution."""

    @pytest.mark.asyncio
    async def test_leading_executes_immediately(self, calls) -> None:
        """The first call of a window runs synchronously."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, leading=True, trailing=False))

        debouncer.maybe_execute("first")
        debouncer.maybe_execute("second")
        debouncer.maybe_execute("third")

        assert calls.calls == ["first"]
        await asyncio.sleep(SETTLE)
        assert calls.calls == ["first"]
        assert debouncer.state.status == PacerStatus.IDLE

    @pytest.mark.asyncio
    async def test_leading_and_trailing(self, calls) -> None:
        """Both edges fire when calls follow the leading one."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, leading=True))

        debouncer.maybe_execute("a")
        debouncer.maybe_execute("b")
        await asyncio.sleep(SETTLE)

        assert calls.calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_single_leading_call_has_no_trailing_run(self, calls) -> None:
        """A lone leading call is not repeated on the trailing edge."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, leading=True))

        debouncer.maybe_execute("a")
        await asyncio.sleep(SETTLE)

        assert calls.calls == ["a"]

    @pytest.mark.asyncio
    async def test_leading_resets_after_quiet_window(self, calls) -> None:
        """A new window gets a new leading execution."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, leading=True, trailing=False))

        debouncer.maybe_execute("a")
        await asyncio.sleep(SETTLE)
        debouncer.maybe_execute("b")

        assert calls.calls == ["a", "b"]


class TestFlushAndCancel:
    """Tests for manual control."""

    @pytest.mark.asyncio
    async def test_flush_runs_pending_call_now(self, calls) -> None:
        """flush() executes the trailing call without waiting."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=1))

        debouncer.maybe_execute("now")
        debouncer.flush()

        assert calls.calls == ["now"]
        assert debouncer.state.is_pending is False
        assert debouncer.state.status == PacerStatus.IDLE

    @pytest.mark.asyncio
    async def test_flush_without_pending_call_is_noop(self, calls) -> None:
        """flush() does nothing when no trailing call is owed."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))
        debouncer.flush()
        assert calls.calls == []

    @pytest.mark.asyncio
    async def test_cancel_discards_pending_call(self, calls) -> None:
        """cancel() drops the trailing call."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))

        debouncer.maybe_execute("x")
        debouncer.cancel()
        await asyncio.sleep(SETTLE)

        assert calls.calls == []
        assert debouncer.state.status == PacerStatus.IDLE
        assert debouncer.state.is_pending is False

    @pytest.mark.asyncio
    async def test_dispose_prevents_trailing_run(self, calls) -> None:
        """No execution happens after dispose()."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT))
        debouncer.maybe_execute("x")

        debouncer.dispose()
        await asyncio.sleep(SETTLE)

        assert calls.calls == []


class TestDisabledAndErrors:
    """Tests for disabled controllers, hooks and failures."""

    @pytest.mark.asyncio
    async def test_disabled_is_silent_noop(self, calls) -> None:
        """A disabled debouncer ignores calls."""
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, enabled=False))

        debouncer.maybe_execute("x")
        await asyncio.sleep(SETTLE)

        assert calls.calls == []
        assert debouncer.state.maybe_execute_count == 0
        assert debouncer.state.status == PacerStatus.DISABLED

    @pytest.mark.asyncio
    async def test_disabling_cancels_pending_call(self, calls) -> None:
        """set_options(enabled=False) drops the trailing call."""
        options = DebouncerOptions(wait=WAIT)
        debouncer = Debouncer(calls, options)

        debouncer.maybe_execute("x")
        debouncer.set_options(options.with_changes(enabled=False))
        await asyncio.sleep(SETTLE)

        assert calls.calls == []
        assert debouncer.state.status == PacerStatus.DISABLED

    @pytest.mark.asyncio
    async def test_on_execute_hook(self, calls) -> None:
        """on_execute receives the executed args."""
        on_execute = MagicMock()
        debouncer = Debouncer(calls, DebouncerOptions(wait=WAIT, on_execute=on_execute))

        debouncer.maybe_execute("x")
        await asyncio.sleep(SETTLE)

        on_execute.assert_called_once_with("x")

    @pytest.mark.asyncio
    async def test_leading_error_propagates(self, failing_calls) -> None:
        """A failing leading execution raises to the caller and leaves state consistent."""
        debouncer = Debouncer(failing_calls, DebouncerOptions(wait=WAIT, leading=True))

        with pytest.raises(ValueError, match="boom"):
            debouncer.maybe_execute("x")

        assert debouncer.state.execution_count == 0
        assert debouncer.state.status == PacerStatus.PENDING
        debouncer.cancel()
