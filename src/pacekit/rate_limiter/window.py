"""Window arithmetic shared by the rate limiters.

Functions here are pure: they take the admission history and the current
time and never touch controller state.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pacekit.enums import WindowType


def window_start(
    times: tuple[datetime, ...],
    now: datetime,
    window: timedelta,
    window_type: WindowType,
) -> datetime:
    """Start of the window that admission is checked against.

    A sliding window stays anchored to the most recent admission until a
    full window has passed since it.
    """
    if window_type == WindowType.SLIDING and times:
        last = times[-1]
        if now - last <= window:
            return last - window
    return now - window


def prune(times: tuple[datetime, ...], start: datetime) -> tuple[datetime, ...]:
    """Keep only the admissions after ``start``."""
    return tuple(t for t in times if t > start)


def remaining_in_window(
    times: tuple[datetime, ...],
    now: datetime,
    window: timedelta,
    limit: int,
) -> int:
    """Admissions still available in the window ending at ``now``."""
    used = sum(1 for t in times if t > now - window)
    return max(0, limit - used)


def ms_until_next_window(
    times: tuple[datetime, ...],
    now: datetime,
    window: timedelta,
    window_type: WindowType,
) -> int:
    """Milliseconds until the oldest relevant admission leaves the window."""
    relevant = prune(times, window_start(times, now, window, window_type))
    if not relevant:
        return 0
    delta = relevant[0] + window - now
    return max(0, int(delta.total_seconds() * 1000))
