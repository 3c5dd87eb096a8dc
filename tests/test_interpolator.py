"""Tests for dead-reckoning interpolation."""

import math

import numpy as np
import pytest

from skytrack.engine import EntityStore, Interpolator, KinematicCache, dead_reckon
from skytrack.engine.interpolator import dead_reckon_many
from skytrack.models import Kinematics, Position

from conftest import make_entity

METERS_PER_DEGREE = 111320.0


def build(entities, staleness_ceiling=30.0, cache_all=True):
    store = EntityStore()
    cache = KinematicCache()
    store.replace(entities)
    if cache_all:
        for entity in entities:
            cache.update(entity)
    interpolator = Interpolator(store, cache, staleness_ceiling=staleness_ceiling,
                                meters_per_degree=METERS_PER_DEGREE)
    return store, cache, interpolator


class TestDeadReckon:
    """Tests for the scalar dead_reckon function."""

    def test_zero_speed_stays_put(self):
        """Stationary aircraft never drift."""
        start = Position(10.0, 20.0)
        for elapsed in (0.0, 1.0, 100.0):
            assert dead_reckon(start, Kinematics(0.0, 45.0), elapsed) == start

    def test_elapsed_zero_is_reported_position(self):
        start = Position(10.0, 20.0)
        assert dead_reckon(start, Kinematics(250.0, 45.0), 0.0) == start

    def test_due_north(self):
        """Heading 0 moves latitude only."""
        result = dead_reckon(Position(0.0, 0.0), Kinematics(111.32, 0.0), 10.0,
                             staleness_ceiling=30.0, meters_per_degree=METERS_PER_DEGREE)
        assert result.longitude == pytest.approx(0.0, abs=1e-12)
        assert result.latitude == pytest.approx(0.01)

    def test_due_east(self):
        """Heading 90 moves longitude only."""
        result = dead_reckon(Position(0.0, 0.0), Kinematics(111.32, 90.0), 10.0,
                             staleness_ceiling=30.0, meters_per_degree=METERS_PER_DEGREE)
        assert result.longitude == pytest.approx(0.01)
        assert result.latitude == pytest.approx(0.0, abs=1e-12)

    def test_monotonic_along_heading(self):
        """Distance from the anchor grows with elapsed time."""
        start = Position(0.0, 0.0)
        kinematics = Kinematics(200.0, 135.0)
        distances = [
            math.hypot(*(a - b for a, b in zip(dead_reckon(start, kinematics, t, 30.0), start)))
            for t in (0.0, 1.0, 5.0, 10.0, 29.0)
        ]
        assert distances == sorted(distances)
        assert len(set(distances)) == len(distances)

    def test_frozen_past_ceiling(self):
        """Beyond the staleness ceiling the position stops changing."""
        start = Position(0.0, 0.0)
        kinematics = Kinematics(200.0, 45.0)
        at_ceiling = dead_reckon(start, kinematics, 30.0, staleness_ceiling=30.0)
        assert dead_reckon(start, kinematics, 31.0, staleness_ceiling=30.0) == at_ceiling
        assert dead_reckon(start, kinematics, 3600.0, staleness_ceiling=30.0) == at_ceiling

    def test_negative_elapsed_clamped(self):
        """Clock skew never extrapolates backwards."""
        start = Position(0.0, 0.0)
        assert dead_reckon(start, Kinematics(200.0, 45.0), -5.0) == start

    def test_vectorized_matches_scalar(self):
        """dead_reckon_many agrees with dead_reckon element-wise."""
        starts = [Position(1.0, 2.0), Position(-70.0, 40.0), Position(150.0, -30.0)]
        motions = [Kinematics(0.0, 10.0), Kinematics(240.0, 270.0), Kinematics(90.0, 33.0)]
        elapsed = [5.0, 12.0, 45.0]

        lons, lats = dead_reckon_many(
            np.array([p.longitude for p in starts]),
            np.array([p.latitude for p in starts]),
            np.array([k.ground_speed for k in motions]),
            np.array([k.heading for k in motions]),
            np.array(elapsed),
            30.0, METERS_PER_DEGREE,
        )

        for i, (start, motion, t) in enumerate(zip(starts, motions, elapsed)):
            expected = dead_reckon(start, motion, t, 30.0, METERS_PER_DEGREE)
            assert lons[i] == pytest.approx(expected.longitude)
            assert lats[i] == pytest.approx(expected.latitude)


class TestInterpolator:
    """Tests for Interpolator.tick."""

    def test_tick_updates_display_position(self):
        entity = make_entity(speed=111.32, heading=0.0, timestamp=1000.0)
        store, _, interpolator = build([entity])

        assert interpolator.tick(now=1010.0) == 1
        assert store.get('abc123').display_position.latitude == pytest.approx(0.01)
        assert entity.reported_position == Position(0.0, 0.0)

    def test_recomputed_from_anchor_each_tick(self):
        """Ticks are absolute, so the same time yields the same position."""
        entity = make_entity(speed=200.0, heading=60.0, timestamp=1000.0)
        store, _, interpolator = build([entity])

        interpolator.tick(now=1005.0)
        first = entity.display_position
        interpolator.tick(now=1020.0)
        interpolator.tick(now=1005.0)
        assert entity.display_position == pytest.approx(first)

    def test_frozen_past_ceiling(self):
        entity = make_entity(speed=200.0, heading=60.0, timestamp=1000.0)
        _, _, interpolator = build([entity], staleness_ceiling=30.0)

        interpolator.tick(now=1030.0)
        frozen = entity.display_position
        interpolator.tick(now=1300.0)
        assert entity.display_position == pytest.approx(frozen)

    def test_missing_anchor_is_skipped(self):
        """An entity without a cache entry keeps its position."""
        entity = make_entity(lon=5.0, lat=5.0, speed=200.0, timestamp=1000.0)
        _, _, interpolator = build([entity], cache_all=False)

        assert interpolator.tick(now=1010.0) == 0
        assert entity.display_position == Position(5.0, 5.0)

    def test_empty_store(self):
        _, _, interpolator = build([])
        assert interpolator.tick(now=1.0) == 0

    def test_tick_never_raises(self):
        """A failing step is logged and counted."""
        entity = make_entity(speed=200.0)
        _, cache, interpolator = build([entity])
        cache._anchors['abc123'] = 'not an anchor'

        assert interpolator.tick(now=1010.0) == 0
        assert interpolator.stats['error_count'] == 1
