"""
Fixed-rate periodic tasks on the asyncio event loop.

"Run this step every N seconds until cancelled." The only suspension point
is the wait between steps; a step that returns an awaitable is awaited
before the next wait. Step failures are logged and the schedule carries on.
"""

import asyncio
import contextlib
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Repeats a step at a fixed rate.

    Deadlines advance by whole intervals from the start time, so a slow
    step shortens the following wait instead of shifting the schedule.
    If a step overruns by more than one interval the missed runs are
    skipped rather than replayed.
    """

    def __init__(self, step: Callable[[], Any], interval: float, name: str = 'periodic'):
        if interval <= 0:
            raise ValueError('interval must be positive')
        self.step = step
        self.interval = interval
        self.name = name

        self._task: Optional[asyncio.Task] = None
        self._runs = 0
        self._failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start on the running loop. First step runs immediately."""
        if self.running:
            logger.warning(f'{self.name} already running')
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(f'{self.name} started (interval={self.interval}s)')

    async def stop(self) -> None:
        """Cancel and wait for the loop to unwind."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug(f'{self.name} stopped after {self._runs} runs')

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_run = loop.time()

        while True:
            try:
                result = self.step()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._failures += 1
                logger.error(f'{self.name} step failed: {e}')
            self._runs += 1

            next_run += self.interval
            now = loop.time()
            if next_run < now:
                next_run = now
            await asyncio.sleep(next_run - now)

    @property
    def stats(self) -> dict:
        return {
            'running': self.running,
            'runs': self._runs,
            'failures': self._failures,
            'interval': self.interval,
        }
