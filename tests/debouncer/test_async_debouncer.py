"""Unit tests for AsyncDebouncer."""

import asyncio
from unittest.mock import MagicMock

import pytest

from pacekit.debouncer import AsyncDebouncer, AsyncDebouncerOptions
from pacekit.enums import PacerStatus
from pacekit.exceptions import PacerAbortedError, PacerDisabledError

WAIT = 0.05


async def _call_later(debouncer: AsyncDebouncer, args: str, delay: float) -> object:
    await asyncio.sleep(delay)
    return await debouncer.maybe_execute(args)


class TestAsyncCoalescing:
    """Tests for shared trailing execution."""

    @pytest.mark.asyncio
    async def test_callers_share_the_trailing_result(self, make_async_fn) -> None:
        """Every coalesced caller receives the one execution's result."""
        fn = make_async_fn(result=lambda args: args.upper())
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=WAIT))

        results = await asyncio.gather(
            _call_later(debouncer, "a", 0),
            _call_later(debouncer, "b", 0.01),
            _call_later(debouncer, "c", 0.02),
        )

        assert results == ["C", "C", "C"]
        assert fn.calls == ["c"]
        assert debouncer.state.execution_count == 1
        assert debouncer.state.success_count == 1
        assert debouncer.state.last_result == "C"
        assert debouncer.state.status == PacerStatus.IDLE

    @pytest.mark.asyncio
    async def test_state_while_pending_and_executing(self, make_async_fn) -> None:
        """Status moves PENDING -> EXECUTING -> IDLE."""
        fn = make_async_fn(delay=0.05)
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=0.02))

        task = asyncio.create_task(debouncer.maybe_execute("x"))
        await asyncio.sleep(0)
        assert debouncer.state.status == PacerStatus.PENDING
        assert debouncer.state.is_pending is True

        await asyncio.sleep(0.04)
        assert debouncer.state.status == PacerStatus.EXECUTING
        assert debouncer.state.is_executing is True

        assert await task == "x"
        assert debouncer.state.status == PacerStatus.IDLE
        assert debouncer.state.is_executing is False

    @pytest.mark.asyncio
    async def test_execution_start_is_one_transition(self, make_async_fn) -> None:
        """Once the timer fires, is_pending and status change together."""
        debouncer = AsyncDebouncer(make_async_fn(delay=0.03), AsyncDebouncerOptions(wait=0.02))
        seen: list[tuple[bool, PacerStatus]] = []
        debouncer.subscribe(lambda state: seen.append((state.is_pending, state.status)))

        task = asyncio.create_task(debouncer.maybe_execute("x"))
        await asyncio.sleep(0.025)

        assert debouncer.state.is_pending is False
        assert debouncer.state.status == PacerStatus.EXECUTING
        assert await task == "x"
        assert (False, PacerStatus.PENDING) not in seen

    @pytest.mark.asyncio
    async def test_caller_after_start_waits_for_next_execution(self, make_async_fn) -> None:
        """A call arriving mid-execution joins the next window."""
        fn = make_async_fn(delay=0.05)
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=0.02))

        first = asyncio.create_task(debouncer.maybe_execute("first"))
        await asyncio.sleep(0.04)
        second = asyncio.create_task(debouncer.maybe_execute("second"))

        assert await first == "first"
        assert await second == "second"
        assert fn.calls == ["first", "second"]


class TestAsyncLeadingEdge:
    """Tests for leading-edge execution."""

    @pytest.mark.asyncio
    async def test_leading_and_trailing_results(self, make_async_fn) -> None:
        """The leading caller gets the leading result; later callers the trailing one."""
        fn = make_async_fn()
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=WAIT, leading=True))

        results = await asyncio.gather(
            debouncer.maybe_execute("a"),
            debouncer.maybe_execute("b"),
            debouncer.maybe_execute("c"),
        )

        assert results == ["a", "c", "c"]
        assert fn.calls == ["a", "c"]

    @pytest.mark.asyncio
    async def test_leading_only_resolves_followers_with_none(self, make_async_fn) -> None:
        """Without a trailing edge, coalesced followers settle with None."""
        fn = make_async_fn()
        debouncer = AsyncDebouncer(
            fn, AsyncDebouncerOptions(wait=WAIT, leading=True, trailing=False)
        )

        results = await asyncio.gather(
            debouncer.maybe_execute("a"),
            debouncer.maybe_execute("b"),
        )

        assert results == ["a", None]
        assert fn.calls == ["a"]
        assert debouncer.state.status == PacerStatus.IDLE


class TestAsyncFlushAndAbort:
    """Tests for flush and abort."""

    @pytest.mark.asyncio
    async def test_flush_returns_result_to_everyone(self, make_async_fn) -> None:
        """flush() runs now and settles waiting callers too."""
        fn = make_async_fn()
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=10))

        waiter = asyncio.create_task(debouncer.maybe_execute("now"))
        await asyncio.sleep(0)

        assert await debouncer.flush() == "now"
        assert await waiter == "now"
        assert debouncer.state.is_pending is False

    @pytest.mark.asyncio
    async def test_flush_without_pending_returns_none(self, make_async_fn) -> None:
        """flush() with nothing owed returns None."""
        debouncer = AsyncDebouncer(make_async_fn(), AsyncDebouncerOptions(wait=WAIT))
        assert await debouncer.flush() is None

    @pytest.mark.asyncio
    async def test_abort_rejects_waiting_callers(self, make_async_fn) -> None:
        """Waiting callers receive PacerAbortedError and fn never runs."""
        fn = make_async_fn()
        debouncer = AsyncDebouncer(fn, AsyncDebouncerOptions(wait=WAIT))

        waiter = asyncio.create_task(debouncer.maybe_execute("x"))
        await asyncio.sleep(0)
        debouncer.abort()

        with pytest.raises(PacerAbortedError):
            await waiter
        await asyncio.sleep(WAIT * 2)
        assert fn.calls == []
        assert debouncer.state.status == PacerStatus.IDLE
        assert debouncer.state.is_pending is False

    @pytest.mark.asyncio
    async def test_abort_discards_in_flight_result(self, make_async_fn) -> None:
        """An execution already running cannot settle after abort()."""
        on_success = MagicMock()
        fn = make_async_fn(delay=0.05)
        debouncer = AsyncDebouncer(
            fn, AsyncDebouncerOptions(wait=0.01, on_success=on_success)
        )

        waiter = asyncio.create_task(debouncer.maybe_execute("x"))
        await asyncio.sleep(0.03)
        assert debouncer.state.is_executing is True

        debouncer.abort()
        with pytest.raises(PacerAbortedError):
            await waiter

        await asyncio.sleep(0.06)
        on_success.assert_not_called()
        assert debouncer.state.execution_count == 0
        assert debouncer.state.is_executing is False

    @pytest.mark.asyncio
    async def test_abort_is_idempotent(self, make_async_fn) -> None:
        """Aborting twice leaves the same resting state."""
        debouncer = AsyncDebouncer(make_async_fn(), AsyncDebouncerOptions(wait=WAIT))
        debouncer.abort()
        first = debouncer.state
        debouncer.abort()
        assert debouncer.state == first


class TestAsyncErrorsAndHooks:
    """Tests for error handling and result hooks."""

    @pytest.mark.asyncio
    async def test_disabled_raises(self, make_async_fn) -> None:
        """A disabled debouncer refuses calls."""
        debouncer = AsyncDebouncer(
            make_async_fn(), AsyncDebouncerOptions(wait=WAIT, enabled=False)
        )
        with pytest.raises(PacerDisabledError):
            await debouncer.maybe_execute("x")

    @pytest.mark.asyncio
    async def test_error_resolves_none_by_default(self, make_async_fn) -> None:
        """Failures are counted and reported through on_error."""
        on_error = MagicMock()
        on_settled = MagicMock()
        fn = make_async_fn(error=ValueError("boom"))
        debouncer = AsyncDebouncer(
            fn,
            AsyncDebouncerOptions(wait=0.01, on_error=on_error, on_settled=on_settled),
        )

        assert await debouncer.maybe_execute("x") is None

        assert debouncer.state.error_count == 1
        assert debouncer.state.settle_count == 1
        assert debouncer.state.execution_count == 0
        on_error.assert_called_once()
        assert isinstance(on_error.call_args.args[0], ValueError)
        error = on_settled.call_args.args[1]
        assert on_settled.call_args.args[0] is None
        assert isinstance(error, ValueError)

    @pytest.mark.asyncio
    async def test_error_rethrown_when_configured(self, make_async_fn) -> None:
        """throw_on_error propagates the failure to the caller."""
        fn = make_async_fn(error=ValueError("boom"))
        debouncer = AsyncDebouncer(
            fn, AsyncDebouncerOptions(wait=0.01, throw_on_error=True)
        )

        with pytest.raises(ValueError, match="boom"):
            await debouncer.maybe_execute("x")
        assert debouncer.state.status == PacerStatus.IDLE

    @pytest.mark.asyncio
    async def test_success_hooks(self, make_async_fn) -> None:
        """on_execute, on_success and on_settled all fire on success."""
        on_execute = MagicMock()
        on_success = MagicMock()
        on_settled = MagicMock()
        debouncer = AsyncDebouncer(
            make_async_fn(),
            AsyncDebouncerOptions(
                wait=0.01,
                on_execute=on_execute,
                on_success=on_success,
                on_settled=on_settled,
            ),
        )

        await debouncer.maybe_execute("x")

        on_execute.assert_called_once_with("x")
        on_success.assert_called_once_with("x")
        on_settled.assert_called_once_with("x", None)

    @pytest.mark.asyncio
    async def test_sync_function_supported(self, calls) -> None:
        """Plain functions are accepted alongside coroutine functions."""
        debouncer = AsyncDebouncer(calls, AsyncDebouncerOptions(wait=0.01))
        assert await debouncer.maybe_execute("x") == "x"
        assert calls.calls == ["x"]
