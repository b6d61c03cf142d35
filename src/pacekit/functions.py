"""Convenience constructors.

Each function builds a controller and returns its primary trigger, for
callers that never need the controller's state or lifecycle methods.

Usage:
    save = debounce(save_draft, wait=0.5)
    save(text)

    fetch = async_retry(fetch_page, max_attempts=5)
    page = await fetch(url)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pacekit.batcher import AsyncBatcher, AsyncBatcherOptions, Batcher, BatcherOptions
from pacekit.core.base import PacerOptions
from pacekit.debouncer import AsyncDebouncer, AsyncDebouncerOptions, Debouncer, DebouncerOptions
from pacekit.queuer import AsyncQueuer, AsyncQueuerOptions, Queuer, QueuerOptions
from pacekit.rate_limiter import (
    AsyncRateLimiter,
    AsyncRateLimiterOptions,
    RateLimiter,
    RateLimiterOptions,
)
from pacekit.retryer import AsyncRetryer, AsyncRetryerOptions
from pacekit.throttler import AsyncThrottler, AsyncThrottlerOptions, Throttler, ThrottlerOptions

OptionsT = TypeVar("OptionsT", bound=PacerOptions)


def _resolve_options(
    model: type[OptionsT], options: OptionsT | None, overrides: dict[str, Any]
) -> OptionsT:
    """Build options from an options object, keywords, or both (keywords win)."""
    if options is None:
        return model(**overrides)
    if overrides:
        return options.with_changes(**overrides)
    return options


def debounce(
    fn: Callable[[Any], Any], options: DebouncerOptions | None = None, **kwargs: Any
) -> Callable[[Any], None]:
    """Debounce a function; returns ``Debouncer.maybe_execute``."""
    return Debouncer(fn, _resolve_options(DebouncerOptions, options, kwargs)).maybe_execute


def async_debounce(
    fn: Callable[[Any], Any], options: AsyncDebouncerOptions | None = None, **kwargs: Any
) -> Callable[[Any], Awaitable[Any]]:
    """Debounce a coroutine function; returns ``AsyncDebouncer.maybe_execute``."""
    pacer = AsyncDebouncer(fn, _resolve_options(AsyncDebouncerOptions, options, kwargs))
    return pacer.maybe_execute


def throttle(
    fn: Callable[[Any], Any], options: ThrottlerOptions | None = None, **kwargs: Any
) -> Callable[[Any], None]:
    """Throttle a function; returns ``Throttler.maybe_execute``."""
    return Throttler(fn, _resolve_options(ThrottlerOptions, options, kwargs)).maybe_execute


def async_throttle(
    fn: Callable[[Any], Any], options: AsyncThrottlerOptions | None = None, **kwargs: Any
) -> Callable[[Any], Awaitable[Any]]:
    """Throttle a coroutine function; returns ``AsyncThrottler.maybe_execute``."""
    pacer = AsyncThrottler(fn, _resolve_options(AsyncThrottlerOptions, options, kwargs))
    return pacer.maybe_execute


def rate_limit(
    fn: Callable[[Any], Any], options: RateLimiterOptions | None = None, **kwargs: Any
) -> Callable[[Any], bool]:
    """Rate limit a function; returns ``RateLimiter.maybe_execute``."""
    return RateLimiter(fn, _resolve_options(RateLimiterOptions, options, kwargs)).maybe_execute


def async_rate_limit(
    fn: Callable[[Any], Any], options: AsyncRateLimiterOptions | None = None, **kwargs: Any
) -> Callable[[Any], Awaitable[Any]]:
    """Rate limit a coroutine function; returns ``AsyncRateLimiter.maybe_execute``."""
    pacer = AsyncRateLimiter(fn, _resolve_options(AsyncRateLimiterOptions, options, kwargs))
    return pacer.maybe_execute


def queue(
    fn: Callable[[Any], Any], options: QueuerOptions | None = None, **kwargs: Any
) -> Callable[..., bool]:
    """Queue items for a function; returns ``Queuer.add_item``.

    Built from keywords alone, the queuer is started unless ``started=False``.
    """
    if options is None:
        kwargs.setdefault("started", True)
    return Queuer(fn, _resolve_options(QueuerOptions, options, kwargs)).add_item


def async_queue(
    fn: Callable[[Any], Any], options: AsyncQueuerOptions | None = None, **kwargs: Any
) -> Callable[..., Any]:
    """Queue items for a coroutine function; returns ``AsyncQueuer.add_item``.

    Built from keywords alone, the queuer is started unless ``started=False``.
    """
    if options is None:
        kwargs.setdefault("started", True)
    return AsyncQueuer(fn, _resolve_options(AsyncQueuerOptions, options, kwargs)).add_item


def batch(
    fn: Callable[[list[Any]], Any], options: BatcherOptions | None = None, **kwargs: Any
) -> Callable[[Any], None]:
    """Batch items for a function; returns ``Batcher.add_item``."""
    return Batcher(fn, _resolve_options(BatcherOptions, options, kwargs)).add_item


def async_batch(
    fn: Callable[[list[Any]], Any], options: AsyncBatcherOptions | None = None, **kwargs: Any
) -> Callable[[Any], Any]:
    """Batch items for a coroutine function; returns ``AsyncBatcher.add_item``."""
    return AsyncBatcher(fn, _resolve_options(AsyncBatcherOptions, options, kwargs)).add_item


def async_retry(
    fn: Callable[[Any], Any], options: AsyncRetryerOptions | None = None, **kwargs: Any
) -> Callable[[Any], Awaitable[Any]]:
    """Retry a coroutine function; returns ``AsyncRetryer.execute``."""
    return AsyncRetryer(fn, _resolve_options(AsyncRetryerOptions, options, kwargs)).execute
