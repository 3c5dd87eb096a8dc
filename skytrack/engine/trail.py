"""
Per-aircraft trail storage for track-history overlays.

Each id keeps a bounded FIFO of distinct reported positions. A point is
only stored if it has moved more than epsilon degrees from the last one,
so aircraft holding on the ground do not fill their buffer with copies.
"""

import math
from collections import deque
from typing import Deque, Dict, Tuple

from skytrack.config import config
from skytrack.models import Position


class TrailBuffer:
    """
    Bounded position history keyed by entity id.

    Written only by the engine's snapshot merge. Readers get tuples, so
    nothing they do can reach the internal deques.
    """

    def __init__(self, max_points: int = None, epsilon: float = None):
        self.max_points = max(1, int(max_points or config.trail.max_points))
        self.epsilon = config.trail.epsilon_degrees if epsilon is None else epsilon
        self._trails: Dict[str, Deque[Position]] = {}

    def append(self, entity_id: str, position: Position) -> bool:
        """
        Add a point to an entity's trail.

        Returns True if the point was stored, False if it was suppressed
        as a near-duplicate of the last point.
        """
        trail = self._trails.get(entity_id)
        if trail is None:
            trail = deque(maxlen=self.max_points)
            self._trails[entity_id] = trail
        elif trail:
            last = trail[-1]
            distance = math.hypot(
                position.longitude - last.longitude,
                position.latitude - last.latitude,
            )
            if distance <= self.epsilon:
                return False

        # deque(maxlen) drops the oldest point once full
        trail.append(Position(position.longitude, position.latitude))
        return True

    def snapshot(self, entity_id: str) -> Tuple[Position, ...]:
        """Ordered copy of the trail, oldest first."""
        return tuple(self._trails.get(entity_id, ()))

    def discard(self, entity_id: str) -> None:
        """Forget an entity's trail."""
        self._trails.pop(entity_id, None)

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._trails

    def __len__(self) -> int:
        return len(self._trails)
