"""Synchronous queuer.

Buffers items and feeds them to the function one at a time while started.
Order is FIFO by default; LIFO and priority ordering are configurable.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pacekit.core.base import Pacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus, QueuePosition

from .buffer import ItemBuffer, QueueEntry
from .schemas import QueuerOptions, QueuerState


class Queuer(Pacer[QueuerOptions, QueuerState]):
    """Process items in order, optionally spaced by ``wait``.

    Without ``wait``, items added while started are processed before
    ``add_item`` returns.

    Usage:
        queuer = Queuer(handle, QueuerOptions(started=True))
        queuer.add_item(job)
    """

    def __init__(self, fn: Callable[[Any], Any], options: QueuerOptions) -> None:
        super().__init__(fn, options, QueuerState())
        self._buffer = ItemBuffer()
        self._timer = Timer()
        self._executing = False

        if options.enabled and options.started:
            self.start()

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------
    def add_item(self, item: Any, position: QueuePosition | None = None) -> bool:
        """Add an item to the queue.

        Args:
            item: Item to queue
            position: End to add to (defaults to options.add_items_to;
                ignored when get_priority is set)

        Returns:
            True if the item was queued, False if disabled or full
        """
        options = self._options
        if not options.enabled:
            return False

        if options.max_size is not None and len(self._buffer) >= options.max_size:
            if options.on_reject:
                options.on_reject(item)
            self._set_state(rejection_count=self._state.rejection_count + 1)
            self._logger.debug("Rejected item: queue full ({})", options.max_size)
            return False

        self._buffer.insert(
            QueueEntry(item, datetime.now(UTC)),
            position or options.add_items_to,
            options.get_priority,
        )
        self._publish(add_item_count=self._state.add_item_count + 1)

        if self._state.is_running:
            self._schedule_next()
        return True

    def get_next_item(self) -> Any:
        """Remove and return the next item, dropping expired items first.

        Returns:
            The next item, or None if the queue is empty
        """
        entry = self._take_next()
        return entry.item if entry is not None else None

    def peek_all_items(self) -> list[Any]:
        """Queued items in processing order."""
        return list(self._buffer.items)

    def clear(self) -> None:
        """Remove all queued items; counters are kept."""
        self._buffer.drain()
        self._publish()

    def reset(self) -> None:
        """Remove all queued items and zero the counters."""
        self._buffer.drain()
        self._publish(
            add_item_count=0,
            expiration_count=0,
            rejection_count=0,
            execution_count=0,
        )

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------
    def start(self) -> None:
        """Start processing queued items."""
        if not self._options.enabled or self._state.is_running:
            return
        self._set_state(is_running=True, status=PacerStatus.RUNNING)
        self._logger.debug("Started with {} queued items", len(self._buffer))
        self._schedule_next()

    def stop(self) -> None:
        """Stop processing; queued items are kept."""
        self._timer.cancel()
        self._update(is_running=False)
        self._set_state(status=self._resting_status())
        self._logger.debug("Stopped with {} queued items", len(self._buffer))

    def flush(self) -> None:
        """Process every queued item now, whether started or not."""
        if not self._options.enabled:
            return
        self._timer.cancel()
        while len(self._buffer):
            self._process_next()

    def set_options(self, options: QueuerOptions) -> None:
        super().set_options(options)
        if options.enabled and options.started and not self._state.is_running:
            self.start()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _resting_status(self) -> PacerStatus:
        if not self._options.enabled:
            return PacerStatus.DISABLED
        if self._state.is_running:
            return PacerStatus.RUNNING
        return PacerStatus.IDLE

    def _publish(self, **changes: Any) -> None:
        """Publish the buffer contents with any extra state changes."""
        options = self._options
        items = self._buffer.items
        self._set_state(
            items=items,
            item_timestamps=self._buffer.timestamps,
            is_full=options.max_size is not None and len(items) >= options.max_size,
            **changes,
        )
        if options.on_items_change:
            options.on_items_change(list(items))

    def _take_next(self) -> QueueEntry | None:
        options = self._options
        expired = self._buffer.expire(datetime.now(UTC), options.expiration_duration)
        for entry in expired:
            if options.on_expire:
                options.on_expire(entry.item)
        if expired:
            self._logger.debug("Expired {} items", len(expired))

        entry = self._buffer.take(options.get_items_from)
        if entry is not None or expired:
            self._publish(expiration_count=self._state.expiration_count + len(expired))
        return entry

    def _schedule_next(self) -> None:
        if self._executing or self._timer.active:
            return
        if not (self._state.is_running and len(self._buffer)):
            return

        wait = self._options.wait
        if wait:
            self._timer.start(wait.total_seconds(), self._on_timer)
            return
        while self._state.is_running and len(self._buffer):
            self._process_next()

    def _on_timer(self) -> None:
        try:
            self._process_next()
        finally:
            self._schedule_next()

    def _process_next(self) -> None:
        entry = self._take_next()
        if entry is None:
            return

        self._executing = True
        self._set_state(status=PacerStatus.EXECUTING)
        try:
            self.fn(entry.item)
        except Exception:
            self._executing = False
            self._set_state(status=self._resting_status())
            raise
        self._executing = False

        if self._options.on_execute:
            self._options.on_execute(entry.item)
        self._set_state(
            execution_count=self._state.execution_count + 1,
            status=self._resting_status(),
        )

    def _on_disable(self) -> None:
        self._timer.cancel()
        self._update(is_running=False)
