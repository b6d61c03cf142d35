"""Queuer options and state."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any

from pydantic import Field

from pacekit.core.base import (
    ArgsHook,
    AsyncPacerOptions,
    AsyncPacerState,
    Duration,
    PacerOptions,
    PacerState,
    PositiveDuration,
)
from pacekit.enums import QueuePosition

# Lower value = higher priority
PriorityFn = Callable[[Any], int]
ItemsHook = Callable[[list[Any]], Any]


class QueuerOptions(PacerOptions):
    """Options for Queuer."""

    wait: Duration | None = Field(
        default=None,
        description="Delay before each item is processed",
    )
    max_size: Annotated[int, Field(ge=1)] | None = Field(
        default=None,
        description="Maximum number of queued items (None = unbounded)",
    )
    add_items_to: QueuePosition = Field(
        default=QueuePosition.BACK,
        description="End that new items are added to",
    )
    get_items_from: QueuePosition = Field(
        default=QueuePosition.FRONT,
        description="End that items are taken from",
    )
    get_priority: PriorityFn | None = Field(
        default=None,
        description="Priority of an item; lower values are processed first",
    )
    expiration_duration: PositiveDuration | None = Field(
        default=None,
        description="Age after which a queued item is dropped",
    )
    started: bool = Field(
        default=False,
        description="Start processing on construction",
    )
    on_execute: ArgsHook | None = Field(
        default=None,
        description="Called with each successfully processed item",
    )
    on_expire: ArgsHook | None = Field(
        default=None,
        description="Called with each expired item",
    )
    on_reject: ArgsHook | None = Field(
        default=None,
        description="Called with each item refused because the queue is full",
    )
    on_items_change: ItemsHook | None = Field(
        default=None,
        description="Called with the queued items after every change",
    )


class AsyncQueuerOptions(QueuerOptions, AsyncPacerOptions):
    """Options for AsyncQueuer."""

    concurrency: int = Field(
        default=1,
        ge=1,
        description="Maximum items processed at the same time",
    )


@dataclass(frozen=True, kw_only=True)
class QueuerState(PacerState):
    """Queuer state snapshot.

    ``items`` and ``item_timestamps`` are aligned: the timestamp at index i
    is the UTC time the item at index i was added.
    """

    add_item_count: int = 0
    expiration_count: int = 0
    rejection_count: int = 0
    items: tuple[Any, ...] = ()
    item_timestamps: tuple[datetime, ...] = ()
    is_full: bool = False
    is_running: bool = False

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True, kw_only=True)
class AsyncQueuerState(QueuerState, AsyncPacerState):
    """AsyncQueuer state snapshot."""

    active_items: tuple[Any, ...] = ()
