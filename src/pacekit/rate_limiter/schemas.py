"""Rate limiter options and state."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import Field

from pacekit.core.base import (
    ArgsHook,
    AsyncPacerOptions,
    AsyncPacerState,
    PacerOptions,
    PacerState,
    PositiveDuration,
)
from pacekit.enums import WindowType


class RateLimiterOptions(PacerOptions):
    """Options for RateLimiter."""

    limit: int = Field(
        ge=1,
        description="Maximum executions admitted per window",
    )
    window: PositiveDuration = Field(
        description="Length of the admission window",
    )
    window_type: WindowType = Field(
        default=WindowType.FIXED,
        description="How the window start is computed",
    )
    on_execute: ArgsHook | None = Field(
        default=None,
        description="Called with the args of each successful execution",
    )
    on_reject: ArgsHook | None = Field(
        default=None,
        description="Called with the args of each rejected call",
    )


class AsyncRateLimiterOptions(RateLimiterOptions, AsyncPacerOptions):
    """Options for AsyncRateLimiter."""

    pass


@dataclass(frozen=True, kw_only=True)
class RateLimiterState(PacerState):
    """Rate limiter state snapshot.

    ``execution_times`` holds the UTC admission times still inside the
    window, oldest first.
    """

    maybe_execute_count: int = 0
    rejection_count: int = 0
    execution_times: tuple[datetime, ...] = ()
    is_exceeded: bool = False


@dataclass(frozen=True, kw_only=True)
class AsyncRateLimiterState(RateLimiterState, AsyncPacerState):
    """AsyncRateLimiter state snapshot."""

    pass
