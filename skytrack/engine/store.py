"""
Entity store - the current set of tracked aircraft.

Holds exactly the entities of the last accepted snapshot, in upstream
order. A new snapshot replaces the whole set in one assignment, so readers
never see a half-merged snapshot; ids missing from the new snapshot are
simply gone.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from skytrack.models import Entity

logger = logging.getLogger(__name__)


class EntityStore:
    """
    Keyed store of the entities currently on display.

    Insertion order is upstream order and is preserved for iteration,
    which the search ranker relies on for stable tie-breaking.
    """

    def __init__(self):
        self._entities: Dict[str, Entity] = {}
        self._replaced_count = 0

    def get(self, entity_id: str) -> Optional[Entity]:
        """Get entity by id, or None if it is not in the current snapshot."""
        return self._entities.get(entity_id)

    def get_all(self) -> List[Entity]:
        """All entities in upstream order."""
        return list(self._entities.values())

    def get_airborne(self) -> List[Entity]:
        """Get only airborne (not on ground) entities."""
        return [e for e in self._entities.values() if not e.on_ground]

    def replace(self, entities: Iterable[Entity]) -> int:
        """
        Swap in a new snapshot.

        Returns count of entities now stored.
        """
        new_entities = {}
        for entity in entities:
            new_entities.setdefault(entity.id, entity)

        self._entities = new_entities
        self._replaced_count += 1

        logger.debug(f'Store replaced with {len(new_entities)} entities')
        return len(new_entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    @property
    def stats(self) -> dict:
        return {
            'entries': len(self._entities),
            'replacements': self._replaced_count,
        }
