import asyncio
from typing import Any, Callable, Optional

from .logger import app_logger


class DebounceTimer:
    """Cancellable one-shot timer.

    ``schedule`` replaces any pending call, so after a burst of calls only the
    last one fires, once, when ``delay`` seconds have passed without another
    call. The callback runs synchronously on the event loop; anything slow it
    starts must be spawned as its own task so that cancelling the timer never
    cancels work already dispatched.
    """

    def __init__(self, delay: float):
        self.logger = app_logger.bind(component="debounce_timer")
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, callback: Callable[..., Any], *args: Any) -> asyncio.Task:
        """Arm the timer, replacing the pending call if any. Needs a running loop."""
        self.cancel()
        self._task = asyncio.ensure_future(self._fire_later(callback, args))
        return self._task

    def cancel(self) -> bool:
        """Drop the pending call. Returns True if one was dropped."""
        if self.pending:
            self._task.cancel()
            self._task = None
            return True
        return False

    async def wait(self):
        """Wait until the pending call has fired or been cancelled."""
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])

    async def _fire_later(self, callback: Callable[..., Any], args: tuple):
        await asyncio.sleep(self.delay)
        self.logger.debug(f"Quiet period of {self.delay:.3f}s elapsed, firing")
        callback(*args)
