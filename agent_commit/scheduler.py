"""Cancellable debounce for orchestration requests."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class DebouncedTrigger:
    """Runs a coroutine once the requests stop arriving for ``delay`` seconds.

    Scheduling a new request cancels the pending one, so a burst of agent-like
    edits produces a single orchestration attempt.
    """

    def __init__(self, delay: float, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, factory: Callable[[], Awaitable[object]]) -> None:
        """Replace any pending request with ``factory`` and restart the timer.

        Without a loop given at construction this must be called from a running
        event loop, otherwise ``RuntimeError`` is raised.
        """
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, loop, factory)

    def cancel(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logger.debug("Pending commit request cancelled")
        return True

    def _fire(self, loop: asyncio.AbstractEventLoop, factory: Callable[[], Awaitable[object]]) -> None:
        self._handle = None
        task = loop.create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for callbacks that have already fired."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
