"""Pytest configuration and shared fixtures.

Usage Guide:
- `calls` records the arguments a sync function was called with
- `make_async_fn` builds a coroutine function with optional delay/failure
"""

import asyncio
from collections.abc import Awaitable, Callable, Generator
from typing import Any

import pytest

from pacekit.config import get_settings

# -----------------------------------------------------------------------------
# Settings Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so env changes in one test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Function Doubles
# -----------------------------------------------------------------------------
class CallRecorder:
    """Sync function double that records its arguments."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[Any] = []
        self.error = error

    def __call__(self, args: Any) -> Any:
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return args


@pytest.fixture
def calls() -> CallRecorder:
    """A recording sync function."""
    return CallRecorder()


@pytest.fixture
def failing_calls() -> CallRecorder:
    """A recording sync function that always raises ValueError."""
    return CallRecorder(error=ValueError("boom"))


AsyncFnFactory = Callable[..., Callable[[Any], Awaitable[Any]]]


@pytest.fixture
def make_async_fn() -> AsyncFnFactory:
    """Factory for recording coroutine functions.

    Usage:
        fn = make_async_fn(delay=0.01, fail_times=2)
        fn.calls  # list of received args
    """

    def factory(
        *,
        delay: float = 0.0,
        fail_times: int = 0,
        error: Exception | None = None,
        result: Callable[[Any], Any] | None = None,
    ) -> Callable[[Any], Awaitable[Any]]:
        state = {"failures": 0}
        recorded: list[Any] = []

        async def fn(args: Any) -> Any:
            recorded.append(args)
            if delay:
                await asyncio.sleep(delay)
            if error is not None:
                raise error
            if state["failures"] < fail_times:
                state["failures"] += 1
                raise RuntimeError(f"failure {state['failures']}")
            return result(args) if result is not None else args

        fn.calls = recorded  # type: ignore[attr-defined]
        return fn

    return factory
