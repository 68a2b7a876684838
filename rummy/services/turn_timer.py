"""Host-side turn countdown.

A background task that calls back into the host once per interval. Only the
host runs one; mirrors display the broadcast ``timeLeft``.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from rummy.constants import TIMER_TICK_SECONDS

logger = logging.getLogger(__name__)


class TurnTimer:
    """Periodic ticker for the host's turn countdown."""

    def __init__(
        self,
        on_tick: Callable[[], Awaitable[None]],
        interval: float = TIMER_TICK_SECONDS,
    ) -> None:
        """Initialize the timer.

        Args:
            on_tick: Coroutine called once per interval
            interval: Seconds between ticks

        """
        self.on_tick = on_tick
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Check if the ticker task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Turn timer started (%.1fs interval)", self.interval)

    async def stop(self) -> None:
        """Stop ticking and wait for the task to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        if task is asyncio.current_task():
            # Stopped from inside a tick; the cancel lands at the next sleep.
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Turn timer stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.on_tick()
            except (RuntimeError, ConnectionError, OSError) as e:
                logger.warning("Turn timer tick failed: %s", e)
