"""Batcher options and state."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import Field

from pacekit.core.base import (
    AsyncPacerOptions,
    AsyncPacerState,
    Duration,
    PacerOptions,
    PacerState,
)

ItemsHook = Callable[[list[Any]], Any]
ShouldExecuteFn = Callable[[list[Any]], bool]


class BatcherOptions(PacerOptions):
    """Options for Batcher.

    A batch is executed when ``get_should_execute`` returns True for the
    buffered items (or, without a predicate, when ``max_size`` is reached),
    or ``wait`` after the first item of the batch was added.
    """

    max_size: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Execute once this many items are buffered",
    )
    wait: Duration | None = Field(
        default=None,
        description="Execute this long after the first item of a batch",
    )
    get_should_execute: ShouldExecuteFn | None = Field(
        default=None,
        description="Custom trigger; replaces the max_size check",
    )
    on_execute: ItemsHook | None = Field(
        default=None,
        description="Called with the items of each successful batch",
    )
    on_items_change: ItemsHook | None = Field(
        default=None,
        description="Called with the buffered items after every change",
    )


class AsyncBatcherOptions(BatcherOptions, AsyncPacerOptions):
    """Options for AsyncBatcher."""

    pass


@dataclass(frozen=True, kw_only=True)
class BatcherState(PacerState):
    """Batcher state snapshot."""

    items: tuple[Any, ...] = ()
    is_pending: bool = False
    total_items_processed: int = 0

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True, kw_only=True)
class AsyncBatcherState(BatcherState, AsyncPacerState):
    """AsyncBatcher state snapshot.

    ``failed_items`` accumulates the items of every failed batch.
    """

    failed_items: tuple[Any, ...] = ()
