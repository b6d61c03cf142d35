"""Synchronous batcher."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pacekit.core.base import Pacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus

from .schemas import BatcherOptions, BatcherState


class Batcher(Pacer[BatcherOptions, BatcherState]):
    """Group items and pass them to the function as one list.

    Usage:
        batcher = Batcher(save_rows, BatcherOptions(max_size=100, wait=1))
        batcher.add_item(row)
    """

    def __init__(self, fn: Callable[[list[Any]], Any], options: BatcherOptions) -> None:
        super().__init__(fn, options, BatcherState())
        self._timer = Timer()

    def add_item(self, item: Any) -> None:
        """Buffer an item, executing the batch if it is ready.

        Args:
            item: Item to add to the current batch
        """
        options = self._options
        if not options.enabled:
            return

        items = (*self._state.items, item)
        self._set_items(items)

        if self._should_execute(items):
            self.execute()
        elif options.wait is not None and not self._timer.active:
            self._timer.start(options.wait.total_seconds(), self.execute)
            self._set_state(is_pending=True, status=PacerStatus.PENDING)

    def execute(self) -> None:
        """Process the buffered items now (no-op when empty)."""
        items = self._state.items
        if not items:
            return

        self._timer.cancel()
        self._set_items((), is_pending=False, status=PacerStatus.EXECUTING)
        batch = list(items)
        try:
            self.fn(batch)
        except Exception:
            self._set_state(status=self._settled_status())
            raise

        if self._options.on_execute:
            self._options.on_execute(batch)
        self._set_state(
            execution_count=self._state.execution_count + 1,
            total_items_processed=self._state.total_items_processed + len(batch),
            status=self._settled_status(),
        )

    def flush(self) -> None:
        """Process the buffered items now."""
        self.execute()

    def stop(self) -> None:
        """Cancel the pending timer; buffered items are kept."""
        self._timer.cancel()
        self._set_state(is_pending=False, status=self._resting_status())

    def peek_all_items(self) -> list[Any]:
        """Buffered items."""
        return list(self._state.items)

    def _should_execute(self, items: tuple[Any, ...]) -> bool:
        options = self._options
        if options.get_should_execute is not None:
            return options.get_should_execute(list(items))
        return options.max_size is not None and len(items) >= options.max_size

    def _settled_status(self) -> PacerStatus:
        if self._timer.active:
            return PacerStatus.PENDING
        return self._resting_status()

    def _set_items(self, items: tuple[Any, ...], **changes: Any) -> None:
        self._set_state(items=items, **changes)
        if self._options.on_items_change:
            self._options.on_items_change(list(items))

    def _on_disable(self) -> None:
        self._timer.cancel()
        self._update(is_pending=False)
