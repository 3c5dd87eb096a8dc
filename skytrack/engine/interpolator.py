"""
Dead-reckoning interpolation between snapshots.

Every tick recomputes each aircraft's display position from its kinematic
anchor and the current time - never incrementally from the previous tick,
so no error accumulates between snapshots.

Model (flat earth, constant heading):
    angular_speed = ground_speed / 111320          [deg/s]
    lon = anchor_lon + sin(heading) * angular_speed * elapsed
    lat = anchor_lat + cos(heading) * angular_speed * elapsed

Good enough over the few seconds between snapshots; it is not geodesically
accurate and longitude error grows away from the equator. Past the
staleness ceiling the elapsed time is clamped, so the position freezes
instead of running away while polling is stalled.

All entities are advanced in one vectorized NumPy pass per tick.
"""

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from skytrack.config import config
from skytrack.engine.kinematics import KinematicCache
from skytrack.engine.store import EntityStore
from skytrack.models import Kinematics, Position

logger = logging.getLogger(__name__)


def dead_reckon(
    position: Position,
    kinematics: Kinematics,
    elapsed: float,
    staleness_ceiling: float = None,
    meters_per_degree: float = None,
) -> Position:
    """
    Extrapolate a single position.

    Scalar reference for the vectorized tick; both must agree.
    """
    ceiling = config.interpolation.staleness_ceiling if staleness_ceiling is None else staleness_ceiling
    meters_per_degree = meters_per_degree or config.interpolation.meters_per_degree

    if not kinematics.ground_speed:
        return position

    elapsed = min(max(elapsed, 0.0), ceiling)
    angular_speed = kinematics.ground_speed / meters_per_degree
    rad = math.radians(kinematics.heading)

    return Position(
        position.longitude + math.sin(rad) * angular_speed * elapsed,
        position.latitude + math.cos(rad) * angular_speed * elapsed,
    )


def dead_reckon_many(
    lons: np.ndarray,
    lats: np.ndarray,
    speeds: np.ndarray,
    headings: np.ndarray,
    elapsed: np.ndarray,
    staleness_ceiling: float,
    meters_per_degree: float,
) -> tuple:
    """Vectorized dead_reckon over parallel arrays; returns (lons, lats)."""
    elapsed = np.clip(elapsed, 0.0, staleness_ceiling)
    angular = np.nan_to_num(speeds) / meters_per_degree
    rad = np.radians(headings)

    distance = angular * elapsed
    return lons + np.sin(rad) * distance, lats + np.cos(rad) * distance


class Interpolator:
    """
    Recomputes display positions for every entity in the store.

    Reads the kinematic cache and the store; writes display_position only.
    """

    def __init__(
        self,
        store: EntityStore,
        cache: KinematicCache,
        staleness_ceiling: Optional[float] = None,
        meters_per_degree: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.cache = cache
        self.staleness_ceiling = (
            config.interpolation.staleness_ceiling if staleness_ceiling is None else staleness_ceiling
        )
        self.meters_per_degree = meters_per_degree or config.interpolation.meters_per_degree
        self.clock = clock

        self._tick_count = 0
        self._error_count = 0

    def tick(self, now: Optional[float] = None) -> int:
        """
        Run one interpolation step.

        Returns the number of entities repositioned. Never raises: a
        failing tick is logged and the previous display positions stay.
        """
        try:
            return self._advance(self.clock() if now is None else now)
        except Exception as e:
            self._error_count += 1
            logger.error(f'Interpolation tick failed: {e}')
            return 0

    def _advance(self, now: float) -> int:
        entities = []
        anchors = []
        for entity in self.store:
            anchor = self.cache.get(entity.id)
            # No anchor, nothing to extrapolate from
            if anchor is None:
                continue
            entities.append(entity)
            anchors.append(anchor)

        self._tick_count += 1
        if not entities:
            return 0

        lons = np.fromiter((a.position.longitude for a in anchors), dtype=float, count=len(anchors))
        lats = np.fromiter((a.position.latitude for a in anchors), dtype=float, count=len(anchors))
        speeds = np.fromiter((a.kinematics.ground_speed for a in anchors), dtype=float, count=len(anchors))
        headings = np.fromiter((a.kinematics.heading for a in anchors), dtype=float, count=len(anchors))
        elapsed = now - np.fromiter((a.timestamp for a in anchors), dtype=float, count=len(anchors))

        new_lons, new_lats = dead_reckon_many(
            lons, lats, speeds, headings, elapsed,
            self.staleness_ceiling, self.meters_per_degree,
        )

        for entity, lon, lat in zip(entities, new_lons.tolist(), new_lats.tolist()):
            entity.display_position = Position(lon, lat)

        return len(entities)

    @property
    def stats(self) -> dict:
        return {
            'tick_count': self._tick_count,
            'error_count': self._error_count,
        }
