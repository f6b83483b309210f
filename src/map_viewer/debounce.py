"""Debounce combinator built on the running asyncio event loop."""

import asyncio
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Debounced:
    """
    Callable wrapper that coalesces rapid calls into one.

    Each call cancels the pending one and schedules fn to run after delay
    seconds of quiescence, with the arguments of the latest call. Must be
    called from code running inside an event loop.
    """

    def __init__(self, fn: Callable[..., Any], delay: float) -> None:
        if delay < 0:
            raise ValueError(f"Debounce delay must not be negative, got {delay}")
        self.fn = fn
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._pending_args: tuple[tuple, dict] | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._pending_args = (args, kwargs)
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            logger.debug(f"Cancelled pending call to {getattr(self.fn, '__name__', self.fn)}")
        self._handle = None
        self._pending_args = None

    def flush(self) -> None:
        """Run the pending call now instead of waiting for the delay."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def _fire(self) -> None:
        args, kwargs = self._pending_args or ((), {})
        self._handle = None
        self._pending_args = None
        self.fn(*args, **kwargs)


def debounce(fn: Callable[..., Any], delay: float) -> Debounced:
    """
    Wrap fn so that bursts of calls run it once, delay seconds after the last.

    Example:
        redraw = debounce(session.apply_color, 0.2)
        redraw()  # scheduled
        redraw()  # previous call cancelled, rescheduled
    """
    return Debounced(fn, delay)
