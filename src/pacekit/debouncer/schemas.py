"""Debouncer options and state."""

from dataclasses import dataclass
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


class DebouncerOptions(PacerOptions):
    """Options for Debouncer."""

    wait: Duration = Field(
        description="Quiet period that must elapse after the last call",
    )
    leading: bool = Field(
        default=False,
        description="Execute on the first call of a quiet window",
    )
    trailing: bool = Field(
        default=True,
        description="Execute with the latest args once the quiet window ends",
    )
    on_execute: ArgsHook | None = Field(
        default=None,
        description="Called with the args of each successful execution",
    )


class AsyncDebouncerOptions(DebouncerOptions, AsyncPacerOptions):
    """Options for AsyncDebouncer."""

    pass


@dataclass(frozen=True, kw_only=True)
class DebouncerState(PacerState):
    """Debouncer state snapshot."""

    maybe_execute_count: int = 0
    last_args: Any = None
    is_pending: bool = False


@dataclass(frozen=True, kw_only=True)
class AsyncDebouncerState(DebouncerState, AsyncPacerState):
    """AsyncDebouncer state snapshot."""

    pass
