"""Helpers shared by the API blueprints."""

import time
from typing import Callable, TypeVar

from flask import abort, current_app

from skytrack.engine import EngineRunner, TrackingEngine

T = TypeVar('T')


def call_engine(fn: Callable[[TrackingEngine], T]) -> T:
    """
    Run fn against the tracking engine on its own loop thread.

    Serialize inside fn so the response reflects one consistent snapshot.
    Aborts with 503 when no engine is running.
    """
    runner: EngineRunner = current_app.config.get('ENGINE_RUNNER')
    if runner is None or not runner.running:
        abort(503, description='Tracking engine not running')
    return runner.call(fn)


def elapsed_ms(start_time: float) -> float:
    """Milliseconds since a perf_counter() reading, for latency fields."""
    return round((time.perf_counter() - start_time) * 1000, 2)
