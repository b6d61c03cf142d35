"""Shared pacer machinery.

Components:
- PacerOptions / AsyncPacerOptions: Frozen, validated option models
- PacerState / AsyncPacerState: Immutable state snapshots
- Pacer / AsyncPacer: Base controllers (listeners, state, task bookkeeping)
- Timer: Single-handle event loop timer
"""

from .base import (
    AsyncPacer,
    AsyncPacerOptions,
    AsyncPacerState,
    Pacer,
    PacerOptions,
    PacerState,
    StateListener,
)
from .timer import Timer

__all__ = [
    # Options
    "AsyncPacerOptions",
    "PacerOptions",
    # State
    "AsyncPacerState",
    "PacerState",
    "StateListener",
    # Controllers
    "AsyncPacer",
    "Pacer",
    # Timing
    "Timer",
]
