"""Throttler options and state."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import Field

from pacekit.core.base import (
    ArgsHook,
    AsyncPacerOptions,
    AsyncPacerState,
    Duration,
    PacerOptions,
    PacerState,
)


class ThrottlerOptions(PacerOptions):
    """Options for Throttler."""

    wait: Duration = Field(
        description="Minimum spacing between executions",
    )
    leading: bool = Field(
        default=True,
        description="Execute immediately when the window is open",
    )
    trailing: bool = Field(
        default=True,
        description="Execute the latest throttled call once the window closes",
    )
    on_execute: ArgsHook | None = Field(
        default=None,
        description="Called with the args of each successful execution",
    )


class AsyncThrottlerOptions(ThrottlerOptions, AsyncPacerOptions):
    """Options for AsyncThrottler."""

    pass


@dataclass(frozen=True, kw_only=True)
class ThrottlerState(PacerState):
    """Throttler state snapshot.

    Times are timezone-aware UTC datetimes.
    """

    maybe_execute_count: int = 0
    last_args: Any = None
    last_execution_time: datetime | None = None
    next_execution_time: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class AsyncThrottlerState(ThrottlerState, AsyncPacerState):
    """AsyncThrottler state snapshot."""

    pass
