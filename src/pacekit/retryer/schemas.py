"""Retryer options and state."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from pydantic import Field

from pacekit.core.base import AsyncPacerOptions, AsyncPacerState, Duration, PositiveDuration
from pacekit.enums import BackoffType

RetryHook = Callable[[int, BaseException], Any]


class AsyncRetryerOptions(AsyncPacerOptions):
    """Options for AsyncRetryer."""

    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per execute() call, including the first",
    )
    backoff: BackoffType = Field(
        default=BackoffType.EXPONENTIAL,
        description="Growth of the delay between attempts",
    )
    base_wait: Duration = Field(
        default=timedelta(milliseconds=100),
        description="Delay unit for the backoff calculation",
    )
    jitter: Duration | None = Field(
        default=None,
        description="Upper bound of the random delay added to each backoff",
    )
    max_execution_time: PositiveDuration | None = Field(
        default=None,
        description="Timeout for a single attempt",
    )
    max_total_execution_time: PositiveDuration | None = Field(
        default=None,
        description="Budget for the whole attempt sequence, backoff included",
    )
    on_retry: RetryHook | None = Field(
        default=None,
        description="Called with (attempt, error) before each backoff delay",
    )
    on_abort: Callable[[], Any] | None = Field(
        default=None,
        description="Called when an active attempt sequence is aborted",
    )
    throw_on_error: bool = Field(
        default=True,
        description="Raise the last error once attempts are exhausted",
    )


@dataclass(frozen=True, kw_only=True)
class AsyncRetryerState(AsyncPacerState):
    """AsyncRetryer state snapshot.

    ``attempt_count`` counts attempts over the retryer's lifetime;
    ``current_attempt`` is the 1-based attempt of the running sequence.
    ``error_count`` counts failed attempts, while ``settle_count`` counts
    finished ``execute()`` calls (success or exhaustion), so a call that
    succeeds on its third attempt adds two errors and one settle.
    """

    attempt_count: int = 0
    current_attempt: int = 0
    last_execution_time: datetime | None = None
    total_execution_time: timedelta | None = None
    last_error: BaseException | None = None
