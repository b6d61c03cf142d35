"""Enums shared by all pacers."""

from enum import StrEnum


class PacerStatus(StrEnum):
    """Operational status of a pacer.

    - DISABLED: options.enabled is False; triggers are ignored or rejected
    - IDLE: enabled and nothing scheduled
    - PENDING: an execution is waiting on a timer
    - EXECUTING: the wrapped function is running
    - RUNNING: a queuer is started and processing items
    """

    DISABLED = "disabled"
    IDLE = "idle"
    PENDING = "pending"
    EXECUTING = "executing"
    RUNNING = "running"


class QueuePosition(StrEnum):
    """End of a queue that items are added to or taken from."""

    FRONT = "front"
    BACK = "back"


class WindowType(StrEnum):
    """How a rate limiter measures its window.

    FIXED counts executions in the last ``window`` before each call.
    SLIDING anchors the window to the most recent admitted execution, so a
    saturated limiter stays closed until a full quiet window has passed.
    """

    FIXED = "fixed"
    SLIDING = "sliding"


class BackoffType(StrEnum):
    """Delay growth between retry attempts."""

    EXPONENTIAL = "exponential"  # base, 2*base, 4*base, ...
    LINEAR = "linear"  # base, 2*base, 3*base, ...
    FIXED = "fixed"  # base, base, base, ...
