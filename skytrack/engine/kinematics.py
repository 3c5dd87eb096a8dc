"""
Kinematic cache - last-known motion anchor per entity.

Keyed by id across snapshot boundaries, so an aircraft that drops out of
one snapshot keeps its anchor (and its trail) until the engine evicts it.
"""

from typing import Dict, NamedTuple, Optional

from skytrack.models import Entity, Kinematics, Position


class KinematicAnchor(NamedTuple):
    """Position, motion and capture time that extrapolation starts from."""
    position: Position
    kinematics: Kinematics
    timestamp: float


class KinematicCache:
    """Per-id kinematic anchors; written only by the snapshot merge."""

    def __init__(self):
        self._anchors: Dict[str, KinematicAnchor] = {}

    def update(self, entity: Entity) -> KinematicAnchor:
        """Capture the entity's reported position and kinematics."""
        anchor = KinematicAnchor(
            position=entity.reported_position,
            kinematics=entity.kinematics,
            timestamp=entity.snapshot_timestamp,
        )
        self._anchors[entity.id] = anchor
        return anchor

    def get(self, entity_id: str) -> Optional[KinematicAnchor]:
        return self._anchors.get(entity_id)

    def discard(self, entity_id: str) -> None:
        self._anchors.pop(entity_id, None)

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._anchors

    def __len__(self) -> int:
        return len(self._anchors)
