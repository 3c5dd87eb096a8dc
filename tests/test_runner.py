"""Tests for the background engine runner."""

import threading
import time

import pytest

from skytrack.engine import EngineRunner, TrackingEngine
from skytrack.ingestion import SnapshotFetcher

from conftest import FakeClient, airlabs_record, make_airport


def make_runner():
    client = FakeClient([airlabs_record('a1')])
    engine = TrackingEngine(SnapshotFetcher(client, max_entities=1000), poll_interval=10)
    return EngineRunner(engine, call_timeout=2.0)


def wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


class TestEngineRunner:
    """Tests for EngineRunner."""

    def test_call_before_start(self):
        with pytest.raises(RuntimeError):
            make_runner().call(lambda engine: None)

    def test_calls_run_on_loop_thread(self):
        """Reads execute on the engine thread, not the caller's."""
        runner = make_runner()
        runner.start()
        try:
            assert runner.call(lambda engine: threading.current_thread().name) == 'skytrack-engine'
            assert runner.call(lambda engine: engine.status.running)
            assert wait_for(lambda: runner.call(lambda engine: engine.get_entity('a1')) is not None)
        finally:
            runner.stop()

        assert not runner.running
        assert not runner.engine.status.running

    def test_airport_loader(self):
        runner = make_runner()
        runner.start(airport_loader=lambda: [make_airport()])
        try:
            assert wait_for(lambda: runner.call(lambda engine: len(engine.airports)) == 1)
        finally:
            runner.stop()

    def test_failed_airport_load_keeps_tracking(self):
        def broken_loader():
            raise OSError('dataset unavailable')

        runner = make_runner()
        runner.start(airport_loader=broken_loader)
        try:
            assert runner.call(lambda engine: engine.status.running)
            assert runner.call(lambda engine: engine.airports) == []
        finally:
            runner.stop()
