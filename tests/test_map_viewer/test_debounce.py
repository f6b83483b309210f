"""
Tests for the debounce combinator.

Educational notes:
- Debounced schedules on the running loop, so tests are async
- A small delay plus asyncio.sleep lets the scheduled call fire
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from src.map_viewer.debounce import Debounced, debounce

DELAY = 0.01


class TestDebounce:
    """Tests for the Debounced wrapper."""

    @pytest.mark.asyncio
    async def test_burst_runs_once_with_latest_args(self):
        """A burst of calls should run once with the latest arguments."""
        fn = MagicMock()
        wrapped = debounce(fn, DELAY)

        wrapped("a")
        wrapped("b")
        wrapped("c", key=1)
        assert wrapped.pending
        fn.assert_not_called()

        await asyncio.sleep(DELAY * 5)
        fn.assert_called_once_with("c", key=1)
        assert not wrapped.pending

    @pytest.mark.asyncio
    async def test_separate_bursts_run_separately(self):
        """Bursts separated by the delay should each run."""
        fn = MagicMock()
        wrapped = debounce(fn, DELAY)

        wrapped(1)
        await asyncio.sleep(DELAY * 5)
        wrapped(2)
        await asyncio.sleep(DELAY * 5)

        assert [c.args for c in fn.call_args_list] == [(1,), (2,)]

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_call(self):
        """cancel() should drop the pending call."""
        fn = MagicMock()
        wrapped = debounce(fn, DELAY)

        wrapped()
        wrapped.cancel()
        await asyncio.sleep(DELAY * 5)

        fn.assert_not_called()
        assert not wrapped.pending

    @pytest.mark.asyncio
    async def test_flush_runs_immediately(self):
        """flush() should run the pending call now."""
        fn = MagicMock()
        wrapped = debounce(fn, 10)

        wrapped("now")
        wrapped.flush()

        fn.assert_called_once_with("now")
        assert not wrapped.pending

    def test_flush_without_pending_call_is_no_op(self):
        """flush() with nothing pending should do nothing."""
        fn = MagicMock()
        debounce(fn, DELAY).flush()
        fn.assert_not_called()

    def test_negative_delay_rejected(self):
        """A negative delay should be rejected."""
        with pytest.raises(ValueError):
            Debounced(MagicMock(), -1)

    def test_needs_running_loop(self):
        """Calling outside an event loop should raise RuntimeError."""
        wrapped = debounce(MagicMock(), DELAY)
        with pytest.raises(RuntimeError):
            wrapped()
