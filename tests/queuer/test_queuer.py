"""Unit tests for the synchronous Queuer."""

import asyncio
import time
from unittest.mock import MagicMock

import pytest

from pacekit.enums import PacerStatus, QueuePosition
from pacekit.queuer import Queuer, QueuerOptions


class TestOrdering:
    """Tests for FIFO, LIFO and priority ordering."""

    def test_fifo_by_default(self, calls) -> None:
        """Items come out in the order they went in."""
        queuer = Queuer(calls, QueuerOptions())
        for item in (1, 2, 3):
            queuer.add_item(item)

        assert queuer.peek_all_items() == [1, 2, 3]
        assert [queuer.get_next_item() for _ in range(3)] == [1, 2, 3]
        assert queuer.get_next_item() is None
        assert calls.calls == []

    def test_lifo(self, calls) -> None:
        """Taking from the back gives stack order."""
        queuer = Queuer(calls, QueuerOptions(get_items_from=QueuePosition.BACK))
        for item in (1, 2, 3):
            queuer.add_item(item)

        assert [queuer.get_next_item() for _ in range(3)] == [3, 2, 1]

    def test_add_to_front_per_call(self, calls) -> None:
        """A per-call position overrides add_items_to."""
        queuer = Queuer(calls, QueuerOptions())
        queuer.add_item("a")
        queuer.add_item("urgent", position=QueuePosition.FRONT)

        assert queuer.peek_all_items() == ["urgent", "a"]

    def test_priority_order(self, calls) -> None:
        """get_priority orders items, lower first."""
        queuer = Queuer(calls, QueuerOptions(get_priority=lambda job: job["priority"]))
        for name, priority in [("low", 5), ("high", 1), ("mid", 3)]:
            queuer.add_item({"name": name, "priority": priority})

        assert [job["name"] for job in queuer.peek_all_items()] == ["high", "mid", "low"]

    def test_state_tracks_items_and_timestamps(self, calls) -> None:
        """items and item_timestamps stay aligned."""
        queuer = Queuer(calls, QueuerOptions())
        queuer.add_item("a")
        queuer.add_item("b")

        state = queuer.state
        assert state.items == ("a", "b")
        assert len(state.item_timestamps) == 2
        assert state.item_timestamps[0] <= state.item_timestamps[1]
        assert state.size == 2
        assert state.is_empty is False
        assert state.add_item_count == 2


class TestCapacity:
    """Tests for bounded queues."""

    def test_full_queue_rejects(self, calls) -> None:
        """Adds beyond max_size are refused."""
        on_reject = MagicMock()
        queuer = Queuer(calls, QueuerOptions(max_size=2, on_reject=on_reject))

        assert queuer.add_item(1) is True
        assert queuer.add_item(2) is True
        assert queuer.add_item(3) is False

        assert queuer.peek_all_items() == [1, 2]
        assert queuer.state.is_full is True
        assert queuer.state.rejection_count == 1
        on_reject.assert_called_once_with(3)

    def test_taking_frees_capacity(self, calls) -> None:
        queuer = Queuer(calls, QueuerOptions(max_size=1))
        queuer.add_item(1)
        queuer.get_next_item()

        assert queuer.state.is_full is False
        assert queuer.add_item(2) is True


class TestProcessing:
    """Tests for started processing."""

    def test_started_processes_immediately(self, calls) -> None:
        """Without wait, a started queuer processes inside add_item."""
        on_execute = MagicMock()
        queuer = Queuer(calls, QueuerOptions(started=True, on_execute=on_execute))

        queuer.add_item("a")
        queuer.add_item("b")

        assert calls.calls == ["a", "b"]
        assert queuer.state.execution_count == 2
        assert queuer.state.is_empty is True
        assert queuer.state.status == PacerStatus.RUNNING
        assert on_execute.call_count == 2

    def test_start_drains_existing_items(self, calls) -> None:
        """start() processes items queued while stopped."""
        queuer = Queuer(calls, QueuerOptions())
        queuer.add_item(1)
        queuer.add_item(2)
        assert queuer.state.status == PacerStatus.IDLE

        queuer.start()

        assert calls.calls == [1, 2]
        assert queuer.state.is_running is True

    def test_stop_keeps_items(self, calls) -> None:
        queuer = Queuer(calls, QueuerOptions(started=True))
        queuer.stop()
        queuer.add_item(1)

        assert calls.calls == []
        assert queuer.peek_all_items() == [1]
        assert queuer.state.status == PacerStatus.IDLE

    def test_flush_processes_while_stopped(self, calls) -> None:
        """flush() empties the queue regardless of running state."""
        queuer = Queuer(calls, QueuerOptions())
        for item in (1, 2, 3):
            queuer.add_item(item)

        queuer.flush()

        assert calls.calls == [1, 2, 3]
        assert queuer.state.is_running is False

    @pytest.mark.asyncio
    async def test_wait_spaces_items(self, calls) -> None:
        """With wait, each item is processed after its own delay."""
        stamps: list[float] = []
        queuer = Queuer(
            calls,
            QueuerOptions(
                wait=0.03,
                started=True,
                on_execute=lambda _: stamps.append(time.monotonic()),
            ),
        )
        for item in (1, 2, 3):
            queuer.add_item(item)
        assert calls.calls == []

        await asyncio.sleep(0.15)

        assert calls.calls == [1, 2, 3]
        gaps = [b - a for a, b in zip(stamps, stamps[1:], strict=False)]
        assert all(gap >= 0.02 for gap in gaps)

    def test_error_propagates_and_drops_item(self, failing_calls) -> None:
        """A failing item is removed and the error reaches the caller."""
        queuer = Queuer(failing_calls, QueuerOptions())
        queuer.add_item("bad")

        with pytest.raises(ValueError, match="boom"):
            queuer.flush()
        assert queuer.state.is_empty is True
        assert queuer.state.execution_count == 0


class TestExpiration:
    """Tests for item expiry."""

    def test_expired_items_are_dropped(self, calls) -> None:
        on_expire = MagicMock()
        queuer = Queuer(
            calls, QueuerOptions(expiration_duration=0.02, on_expire=on_expire)
        )
        queuer.add_item("stale")
        time.sleep(0.04)
        queuer.add_item("fresh")

        assert queuer.get_next_item() == "fresh"
        on_expire.assert_called_once_with("stale")
        assert queuer.state.expiration_count == 1
        assert queuer.state.is_empty is True


class TestLifecycle:
    """Tests for clear, reset, listeners and disabling."""

    def test_clear_keeps_counters(self, calls) -> None:
        queuer = Queuer(calls, QueuerOptions())
        queuer.add_item(1)
        queuer.clear()

        assert queuer.state.is_empty is True
        assert queuer.state.add_item_count == 1

    def test_reset_is_idempotent(self, calls) -> None:
        """reset() empties and zeroes; a second reset changes nothing."""
        queuer = Queuer(calls, QueuerOptions(max_size=1))
        queuer.add_item(1)
        queuer.add_item(2)

        queuer.reset()
        first = queuer.state
        queuer.reset()

        assert queuer.state == first
        assert first.add_item_count == 0
        assert first.rejection_count == 0
        assert first.is_full is False

    def test_on_items_change(self, calls) -> None:
        """on_items_change receives the queued items after every change."""
        seen: list[list[object]] = []
        queuer = Queuer(calls, QueuerOptions(on_items_change=seen.append))

        queuer.add_item(1)
        queuer.add_item(2)
        queuer.get_next_item()

        assert seen == [[1], [1, 2], [2]]

    def test_disabled_refuses_items(self, calls) -> None:
        queuer = Queuer(calls, QueuerOptions(enabled=False, started=True))
        assert queuer.add_item(1) is False
        assert queuer.state.status == PacerStatus.DISABLED
        assert queuer.state.is_running is False

    def test_enabling_with_started_begins_processing(self, calls) -> None:
        """Re-enabling a started queuer resumes processing."""
        options = QueuerOptions(started=True)
        queuer = Queuer(calls, options)
        queuer.set_options(options.with_changes(enabled=False))
        assert queuer.state.is_running is False

        queuer.set_options(options)
        queuer.add_item(1)

        assert calls.calls == [1]
        assert queuer.state.status == PacerStatus.RUNNING
