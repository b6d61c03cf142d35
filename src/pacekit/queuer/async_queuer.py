"""Asynchronous queuer.

Each queued item carries its own completion, so results are always
delivered to the caller that added the item, whatever the processing order.
Up to ``concurrency`` items are processed at the same time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus, QueuePosition
from pacekit.exceptions import PacerAbortedError, PacerDisabledError

from .buffer import ItemBuffer, QueueEntry
from .schemas import AsyncQueuerOptions, AsyncQueuerState


class AsyncQueuer(AsyncPacer[AsyncQueuerOptions, AsyncQueuerState]):
    """Process queued items with a coroutine function.

    Usage:
        queuer = AsyncQueuer(upload, AsyncQueuerOptions(concurrency=3, started=True))
        future = queuer.add_item(path)
        if future is not None:
            result = await future
    """

    def __init__(self, fn: Callable[[Any], Any], options: AsyncQueuerOptions) -> None:
        super().__init__(fn, options, AsyncQueuerState())
        self._buffer = ItemBuffer()
        self._active: list[QueueEntry] = []
        self._timer = Timer()
        self._flushing = False

        if options.enabled and options.started:
            self.start()

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------
    def add_item(
        self, item: Any, position: QueuePosition | None = None
    ) -> asyncio.Future[Any] | None:
        """Add an item to the queue.

        Args:
            item: Item to queue
            position: End to add to (defaults to options.add_items_to;
                ignored when get_priority is set)

        Returns:
            Future resolving with the item's result, or None if the queue
            is full

        Raises:
            PacerDisabledError: If the queuer is disabled
        """
        options = self._options
        if not options.enabled:
            raise PacerDisabledError(self.name)

        if options.max_size is not None and len(self._buffer) >= options.max_size:
            if options.on_reject:
                options.on_reject(item)
            self._set_state(rejection_count=self._state.rejection_count + 1)
            self._logger.debug("Rejected item: queue full ({})", options.max_size)
            return None

        entry = QueueEntry(item, datetime.now(UTC), self._new_future())
        self._buffer.insert(entry, position or options.add_items_to, options.get_priority)
        self._publish(add_item_count=self._state.add_item_count + 1)

        if self._state.is_running:
            self._schedule_next()
        return entry.future

    def get_next_item(self) -> Any:
        """Remove and return the next item, dropping expired items first.

        The caller takes over the item; its completion resolves with None.

        Returns:
            The next item, or None if the queue is empty
        """
        entry = self._take_next()
        if entry is None:
            return None
        self._resolve(entry.future, None)
        return entry.item

    def peek_all_items(self) -> list[Any]:
        """Queued items in processing order."""
        return list(self._buffer.items)

    def peek_pending_items(self) -> list[Any]:
        """Items waiting to be processed."""
        return list(self._buffer.items)

    def peek_active_items(self) -> list[Any]:
        """Items currently being processed."""
        return [entry.item for entry in self._active]

    def clear(self) -> None:
        """Remove all queued items; their completions are rejected. Counters are kept."""
        self._discard_queued("cleared")
        self._publish()

    def reset(self) -> None:
        """Remove all queued items and zero the counters."""
        self._discard_queued("cleared")
        self._publish(
            add_item_count=0,
            expiration_count=0,
            rejection_count=0,
            execution_count=0,
            error_count=0,
            success_count=0,
            settle_count=0,
        )

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------
    def start(self) -> None:
        """Start processing queued items."""
        if not self._options.enabled or self._state.is_running:
            return
        status = PacerStatus.EXECUTING if self._active else PacerStatus.RUNNING
        self._set_state(is_running=True, status=status)
        self._logger.debug("Started with {} queued items", len(self._buffer))
        self._schedule_next()

    def stop(self) -> None:
        """Stop taking new items; items in flight finish normally."""
        self._timer.cancel()
        self._update(is_running=False)
        status = PacerStatus.EXECUTING if self._active else self._resting_status()
        self._set_state(status=status)
        self._logger.debug("Stopped with {} queued items", len(self._buffer))

    def flush(self) -> None:
        """Start queued items now, skipping ``wait``, and return immediately.

        Works while stopped. ``concurrency`` still bounds how many run at the
        same time; the rest start as slots free up. Await the futures returned
        by add_item for the results.
        """
        if not self._options.enabled or not len(self._buffer):
            return
        self._timer.cancel()
        self._flushing = True
        self._schedule_next()

    def abort(self) -> None:
        """Stop processing, empty the queue and reject every pending completion."""
        self._timer.cancel()
        self._flushing = False
        self._discard_queued("aborted")
        for entry in self._active:
            self._reject(entry.future, self._aborted_error())
        self._active.clear()
        self._invalidate()
        self._update(is_running=False)
        self._publish(
            active_items=(),
            is_executing=False,
            status=self._resting_status(),
        )
        self._logger.info("Aborted")

    def set_options(self, options: AsyncQueuerOptions) -> None:
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

    def _discard_queued(self, reason: str) -> None:
        self._flushing = False
        for entry in self._buffer.drain():
            self._reject(entry.future, PacerAbortedError(self.name, reason))

    def _take_next(self) -> QueueEntry | None:
        options = self._options
        expired = self._buffer.expire(datetime.now(UTC), options.expiration_duration)
        for entry in expired:
            if options.on_expire:
                options.on_expire(entry.item)
            self._resolve(entry.future, None)
        if expired:
            self._logger.debug("Expired {} items", len(expired))

        entry = self._buffer.take(options.get_items_from)
        if entry is not None or expired:
            self._publish(expiration_count=self._state.expiration_count + len(expired))
        return entry

    def _mark_active(self, entry: QueueEntry) -> None:
        self._active.append(entry)
        self._update(active_items=tuple(e.item for e in self._active))

    def _release(self, entry: QueueEntry) -> dict[str, Any]:
        if entry in self._active:
            self._active.remove(entry)
        return {"active_items": tuple(e.item for e in self._active)}

    def _schedule_next(self) -> None:
        if not (self._state.is_running or self._flushing):
            return
        if self._timer.active and not self._flushing:
            return
        options = self._options
        while len(self._buffer) and len(self._active) < options.concurrency:
            if options.wait and not self._flushing:
                self._timer.start(options.wait.total_seconds(), self._on_timer)
                return
            entry = self._take_next()
            if entry is None:
                break
            self._mark_active(entry)
            self._spawn(self._process(entry))
        if self._flushing and not len(self._buffer):
            self._flushing = False

    def _on_timer(self) -> None:
        entry = self._take_next()
        if entry is not None:
            self._mark_active(entry)
            self._spawn(self._process(entry))
        self._schedule_next()

    async def _process(self, entry: QueueEntry) -> None:
        if entry not in self._active:
            return  # aborted before it started
        await self._run(
            entry.item,
            entry.future,
            success_changes=lambda _: self._release(entry),
            error_changes=lambda _: self._release(entry),
        )
        self._schedule_next()

    def _on_disable(self) -> None:
        self.abort()
