"""Event-loop driven tick scheduling."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from workout_tracker.services.timer import TickScheduler

_logger = logging.getLogger(__name__)


@dataclass
class AsyncioTickScheduler(TickScheduler):
    """Runs a callback every ``interval_seconds`` on the running event loop."""

    interval_seconds: float = 1.0
    _callback: Callable[[], None] | None = field(default=None, init=False)
    _handle: asyncio.TimerHandle | None = field(default=None, init=False)

    @property
    def active(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        """Start ticking, replacing any previous callback."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._callback = callback
        self._handle = loop.call_later(self.interval_seconds, self._fire, loop)

    def cancel(self) -> None:
        """Stop ticking."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None

    def dispatch(self, task: Callable[[], object]) -> None:
        """Run a blocking task off the loop without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            task()
            return
        loop.run_in_executor(None, task)

    def _fire(self, loop: asyncio.AbstractEventLoop) -> None:
        callback = self._callback
        if callback is None:
            return
        self._handle = loop.call_later(self.interval_seconds, self._fire, loop)
        try:
            callback()
        except Exception:
            _logger.exception("Workout tick failed")
