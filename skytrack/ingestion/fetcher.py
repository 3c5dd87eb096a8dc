"""
Snapshot fetcher - one upstream request turned into a normalized snapshot.

Pipeline stages per fetch:
1. Fetch: blocking client call, run in a worker thread
2. Parse: raw records into their upstream variant (malformed -> dropped)
3. Filter: keep in-flight records with a usable position
4. Cap: first max_entities accepted records, upstream order is priority
5. Normalize: each variant maps itself into an Entity (SI units)

The fetcher never touches engine state; the engine commits the returned
Snapshot in a single synchronous step.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from skytrack.config import config
from skytrack.exceptions import NoDataError
from skytrack.ingestion.airlabs_client import AirLabsClient
from skytrack.ingestion.opensky_client import OpenSkyClient
from skytrack.ingestion.sources import parse_records
from skytrack.models import Entity

logger = logging.getLogger(__name__)


class TelemetryClient(Protocol):
    """Anything that can return one raw snapshot from an upstream source."""
    source: str

    def get_raw_records(self) -> List[Any]:
        ...


@dataclass
class Snapshot:
    """One normalized batch of entities from a single fetch cycle."""
    entities: List[Entity]
    received_at: float
    raw_count: int = 0
    malformed: int = 0
    filtered: int = 0
    duplicates: int = 0
    capped: int = 0

    def __len__(self) -> int:
        return len(self.entities)


class SnapshotFetcher:
    """
    Fetches and normalizes snapshots from one upstream client.

    Holds no state between calls, so overlapping fetch cycles are safe
    to run.
    """

    def __init__(
        self,
        client: TelemetryClient,
        max_entities: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.max_entities = max_entities or config.fetch.max_entities
        self.clock = clock

    async def fetch(self) -> Snapshot:
        """
        Execute one fetch.

        Raises:
            UpstreamError on transport or payload failure
            NoDataError when the snapshot holds no usable record
        """
        raw_records = await asyncio.to_thread(self.client.get_raw_records)
        return self.normalize(raw_records, self.clock())

    def normalize(self, raw_records: List[Any], received_at: float) -> Snapshot:
        """Turn raw upstream records into a capped, de-duplicated Snapshot."""
        snapshot = Snapshot(entities=[], received_at=received_at, raw_count=len(raw_records))
        seen = set()

        for record in parse_records(self.client.source, raw_records):
            if record is None:
                snapshot.malformed += 1
                continue

            if not record.is_trackable():
                snapshot.filtered += 1
                continue

            if len(snapshot.entities) >= self.max_entities:
                snapshot.capped += 1
                continue

            entity = record.to_entity(received_at)
            if entity.id in seen:
                # First occurrence keeps upstream priority
                snapshot.duplicates += 1
                continue

            seen.add(entity.id)
            snapshot.entities.append(entity)

        if snapshot.malformed or snapshot.filtered or snapshot.capped or snapshot.duplicates:
            logger.debug(
                f'Dropped {snapshot.malformed} malformed, {snapshot.filtered} untrackable, '
                f'{snapshot.duplicates} duplicate, {snapshot.capped} over-cap records '
                f'from {self.client.source}'
            )

        if not snapshot.entities:
            raise NoDataError(
                f'No flight data available from {self.client.source}',
                source=self.client.source,
            )

        logger.debug(f'Normalized {len(snapshot)} of {snapshot.raw_count} records')
        return snapshot


def create_client(source: Optional[str] = None) -> TelemetryClient:
    """Build the configured upstream client."""
    source = source or config.upstream.source
    if source == 'opensky':
        return OpenSkyClient.from_config()
    return AirLabsClient.from_config()
