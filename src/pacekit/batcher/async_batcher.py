"""Asynchronous batcher.

Every item added to a batch shares that batch's completion. Once a batch is
triggered its items leave the buffer before the function runs, so items
added meanwhile belong to the next batch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from pacekit.core.base import AsyncPacer
from pacekit.core.timer import Timer
from pacekit.enums import PacerStatus
from pacekit.exceptions import PacerDisabledError

from .schemas import AsyncBatcherOptions, AsyncBatcherState


class AsyncBatcher(AsyncPacer[AsyncBatcherOptions, AsyncBatcherState]):
    """Group items and pass them to a coroutine function as one list.

    Usage:
        batcher = AsyncBatcher(bulk_insert, AsyncBatcherOptions(max_size=50, wait=0.5))
        result = await batcher.add_item(row)
    """

    def __init__(self, fn: Callable[[list[Any]], Any], options: AsyncBatcherOptions) -> None:
        super().__init__(fn, options, AsyncBatcherState())
        self._timer = Timer()
        self._batch_future: asyncio.Future[Any] | None = None

    def add_item(self, item: Any) -> asyncio.Future[Any]:
        """Buffer an item, executing the batch if it is ready.

        Args:
            item: Item to add to the current batch

        Returns:
            Future resolving with the result of the batch the item ends up in
            ([] if that batch fails and throw_on_error is False)

        Raises:
            PacerDisabledError: If the batcher is disabled
        """
        options = self._options
        if not options.enabled:
            raise PacerDisabledError(self.name)

        if self._batch_future is None:
            self._batch_future = self._new_future()
        future = self._batch_future

        items = (*self._state.items, item)
        self._set_items(items)

        if self._should_execute(items):
            self._start_batch()
        elif options.wait is not None and not self._timer.active:
            self._timer.start(options.wait.total_seconds(), self._start_batch)
            self._set_state(is_pending=True, status=PacerStatus.PENDING)
        return future

    async def execute(self) -> Any:
        """Process the buffered items now.

        Returns:
            The batch result, or [] if the buffer was empty
        """
        future = self._start_batch()
        if future is None:
            return []
        return await self._wait_for(future)

    async def flush(self) -> Any:
        """Process the buffered items now."""
        return await self.execute()

    def stop(self) -> None:
        """Cancel the pending timer; buffered items are kept."""
        self._timer.cancel()
        status = PacerStatus.EXECUTING if self._running else self._resting_status()
        self._set_state(is_pending=False, status=status)

    def abort(self) -> None:
        """Drop the buffer and reject every pending completion."""
        self._timer.cancel()
        future, self._batch_future = self._batch_future, None
        self._reject(future, self._aborted_error())
        self._invalidate()
        self._set_items(
            (),
            is_pending=False,
            is_executing=False,
            status=self._resting_status(),
        )
        self._logger.debug("Aborted")

    def peek_all_items(self) -> list[Any]:
        """Buffered items."""
        return list(self._state.items)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------
    def _start_batch(self) -> asyncio.Future[Any] | None:
        """Move the buffer into a new execution."""
        items = self._state.items
        if not items:
            return None

        self._timer.cancel()
        future, self._batch_future = self._batch_future, None
        if future is None:
            future = self._new_future()
        self._set_items((), is_pending=False, is_executing=True, status=PacerStatus.EXECUTING)

        batch = list(items)
        self._spawn(
            self._run(
                batch,
                future,
                success_changes=lambda _: {
                    "total_items_processed": self._state.total_items_processed + len(batch)
                },
                error_changes=lambda _: {"failed_items": (*self._state.failed_items, *batch)},
                error_result=[],
            )
        )
        return future

    def _should_execute(self, items: tuple[Any, ...]) -> bool:
        options = self._options
        if options.get_should_execute is not None:
            return options.get_should_execute(list(items))
        return options.max_size is not None and len(items) >= options.max_size

    def _set_items(self, items: tuple[Any, ...], **changes: Any) -> None:
        self._set_state(items=items, **changes)
        if self._options.on_items_change:
            self._options.on_items_change(list(items))

    def _after_run_changes(self) -> dict[str, Any]:
        if self._timer.active:
            return {"status": PacerStatus.PENDING}
        return {"status": self._resting_status()}

    def _on_disable(self) -> None:
        self.abort()
