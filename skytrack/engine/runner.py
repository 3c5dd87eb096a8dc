"""
Hosts a TrackingEngine's event loop in a background thread.

Flask handlers run on their own worker threads. They never touch engine
state directly: every read is submitted to the engine's loop with
run_coroutine_threadsafe and executes between ticks, on the loop thread.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional, TypeVar

from skytrack.engine.tracker import TrackingEngine

logger = logging.getLogger(__name__)

T = TypeVar('T')


class EngineRunner:
    """Background-thread event loop driving one engine."""

    def __init__(self, engine: TrackingEngine, call_timeout: float = 5.0):
        self.engine = engine
        self.call_timeout = call_timeout

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, airport_loader: Optional[Callable[[], list]] = None) -> None:
        """
        Start the loop thread and the engine on it.

        airport_loader, if given, runs once in a worker thread; a failure
        leaves airport search empty but does not stop tracking.
        """
        if self.running:
            logger.warning('Engine runner already running')
            return

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name='skytrack-engine',
            daemon=True,
        )
        self._thread.start()

        self._loop.call_soon_threadsafe(self.engine.start)
        if airport_loader is not None:
            asyncio.run_coroutine_threadsafe(self._load_airports(airport_loader), self._loop)

        logger.info('Background engine started')

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    async def _load_airports(self, loader: Callable[[], list]) -> None:
        try:
            airports = await asyncio.to_thread(loader)
        except Exception as e:
            logger.error(f'Airport load failed, airport search disabled: {e}')
            return
        self.engine.set_airports(airports)

    def call(self, fn: Callable[[TrackingEngine], T]) -> T:
        """Run fn(engine) on the loop thread and return its result."""
        if not self.running:
            raise RuntimeError('Engine runner is not running')

        async def invoke():
            return fn(self.engine)

        future = asyncio.run_coroutine_threadsafe(invoke(), self._loop)
        return future.result(timeout=self.call_timeout)

    def stop(self) -> None:
        """Stop the engine, then the loop, then join the thread."""
        if not self.running:
            return

        future = asyncio.run_coroutine_threadsafe(self.engine.stop(), self._loop)
        try:
            future.result(timeout=self.call_timeout)
        except Exception as e:
            logger.error(f'Engine stop failed: {e}')

        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()

        self._thread = None
        self._loop = None
        logger.info('Background engine stopped')
