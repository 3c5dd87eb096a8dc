"""
Tracking engine - owns the live aircraft state and both periodic loops.

Two activities share one asyncio event loop:
- Fetch: every poll interval a fetch cycle is launched as its own task,
  so a hung request only delays its own cycle.
- Interpolate: every frame tick, display positions are recomputed.

All state lives on this object (no module globals), so several engines
can run side by side and tests can tear one down deterministically.

Merge ordering within one accepted snapshot:
1. Kinematic cache updated for every id
2. Trail points appended for every id
3. Entity store replaced wholesale
4. Cache/trail entries absent for too many cycles evicted
All four happen in one synchronous step after the network await, so the
interpolator and search never see a partially merged snapshot.

Each cycle takes a generation number when it starts. A response only
commits if its generation is newer than the last committed one, so a slow
response can no longer overwrite a newer snapshot.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from skytrack.config import config
from skytrack.engine.interpolator import Interpolator
from skytrack.engine.kinematics import KinematicCache
from skytrack.engine.scheduler import PeriodicTask
from skytrack.engine.store import EntityStore
from skytrack.engine.trail import TrailBuffer
from skytrack.exceptions import UpstreamError
from skytrack.ingestion.fetcher import Snapshot, SnapshotFetcher
from skytrack.models import Entity, Position, ReferenceAirport
from skytrack.search import SearchRanker, SearchResults

logger = logging.getLogger(__name__)


@dataclass
class EngineStatus:
    """Connectivity and freshness as shown to consumers."""
    running: bool = False
    loading: bool = True
    error: Optional[str] = None
    last_update: Optional[float] = None
    generation: int = 0
    entity_count: int = 0
    fetch_count: int = 0
    error_count: int = 0
    discarded_count: int = 0

    @property
    def degraded(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        result = asdict(self)
        result['degraded'] = self.degraded
        return result


class TrackingEngine:
    """
    Live aircraft synchronization and interpolation.

    Usage (inside a running event loop):
        engine = TrackingEngine(SnapshotFetcher(client))
        engine.start()
        ...
        await engine.stop()
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        airports: Optional[Sequence[ReferenceAirport]] = None,
        poll_interval: Optional[float] = None,
        tick_interval: Optional[float] = None,
        staleness_ceiling: Optional[float] = None,
        evict_after_cycles: Optional[int] = None,
        ranker: Optional[SearchRanker] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.fetcher = fetcher
        self.airports: List[ReferenceAirport] = []
        self._airport_index: Dict[str, ReferenceAirport] = {}
        if airports:
            self.set_airports(airports)
        self.poll_interval = poll_interval or config.fetch.poll_interval
        self.tick_interval = tick_interval or config.interpolation.tick_interval
        self.evict_after_cycles = evict_after_cycles or config.fetch.evict_after_cycles
        self.clock = clock

        self.store = EntityStore()
        self.cache = KinematicCache()
        self.trails = TrailBuffer()
        self.interpolator = Interpolator(
            self.store, self.cache,
            staleness_ceiling=staleness_ceiling,
            clock=clock,
        )
        self.ranker = ranker or SearchRanker()
        self.status = EngineStatus()

        self._fetch_loop: Optional[PeriodicTask] = None
        self._tick_loop: Optional[PeriodicTask] = None
        self._inflight: Set[asyncio.Task] = set()
        self._stopped = False

        # Generation bookkeeping
        self._issued_generation = 0
        self._committed_generation = 0
        self._commit_count = 0
        self._last_seen: Dict[str, int] = {}

        self._on_update_callbacks: List[Callable[[int], None]] = []

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start both periodic activities on the running event loop."""
        if self.status.running:
            logger.warning('Engine already running')
            return

        self._stopped = False
        self._fetch_loop = PeriodicTask(self._launch_cycle, self.poll_interval, name='fetch')
        self._tick_loop = PeriodicTask(self.tick, self.tick_interval, name='interpolate')
        self._fetch_loop.start()
        self._tick_loop.start()
        self.status.running = True

        logger.info(
            f'Tracking engine started (poll={self.poll_interval}s, '
            f'tick={self.tick_interval * 1000:.1f}ms, source={self.fetcher.client.source})'
        )

    async def stop(self) -> None:
        """
        Stop both activities and cancel in-flight fetches.

        No store, cache or trail mutation happens after this returns.
        """
        self._stopped = True
        self.status.running = False

        for periodic in (self._fetch_loop, self._tick_loop):
            if periodic is not None:
                await periodic.stop()
        self._fetch_loop = self._tick_loop = None

        inflight = list(self._inflight)
        for task in inflight:
            task.cancel()
        for task in inflight:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._inflight.clear()

        logger.info('Tracking engine stopped')

    def add_update_callback(self, callback: Callable[[int], None]) -> None:
        """
        Register callback to be invoked after each committed snapshot.

        Callback receives the count of entities now stored.
        """
        self._on_update_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Fetch cycle
    # -------------------------------------------------------------------------

    def _launch_cycle(self) -> None:
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def refresh(self) -> bool:
        """
        Execute one fetch cycle.

        Returns True if the snapshot was committed. Failures are recorded
        in the status and never raised; the previous snapshot stays.
        """
        self._issued_generation += 1
        generation = self._issued_generation

        try:
            snapshot = await self.fetcher.fetch()
        except UpstreamError as e:
            self._record_error(generation, e)
            return False
        except Exception as e:
            logger.exception(f'Unexpected fetch failure: {e}')
            self._record_error(generation, e)
            return False

        return self.commit(generation, snapshot)

    def commit(self, generation: int, snapshot: Snapshot) -> bool:
        """Merge a snapshot if it is newer than the last committed one."""
        if self._stopped:
            logger.debug(f'Ignoring generation {generation}: engine stopped')
            return False

        if generation <= self._committed_generation:
            self.status.discarded_count += 1
            logger.warning(
                f'Discarding out-of-order snapshot (generation {generation} '
                f'<= committed {self._committed_generation})'
            )
            return False

        self._commit_count += 1
        for entity in snapshot.entities:
            self.cache.update(entity)
            self.trails.append(entity.id, entity.reported_position)
            self._last_seen[entity.id] = self._commit_count

        count = self.store.replace(snapshot.entities)
        evicted = self._evict_absent()

        self._committed_generation = generation
        self.status.loading = False
        self.status.error = None
        self.status.last_update = snapshot.received_at
        self.status.generation = generation
        self.status.entity_count = count
        self.status.fetch_count += 1

        logger.info(
            f'Tracking {count} flights from {self.fetcher.client.source}'
            + (f' ({evicted} evicted)' if evicted else '')
        )

        for callback in self._on_update_callbacks:
            try:
                callback(count)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return True

    def _record_error(self, generation: int, error: Exception) -> None:
        if self._stopped:
            return

        self.status.error_count += 1
        if generation < self._committed_generation:
            # A newer snapshot already landed; this failure is old news
            logger.debug(f'Ignoring failure of superseded generation {generation}: {error}')
            return

        self.status.loading = False
        self.status.error = f'Connection issue: {error}'
        logger.error(f'Fetch cycle {generation} failed: {error}')

    def _evict_absent(self) -> int:
        """Drop cache and trail entries for ids absent too many snapshots."""
        expired = [
            entity_id for entity_id, seen in self._last_seen.items()
            if self._commit_count - seen >= self.evict_after_cycles
        ]
        for entity_id in expired:
            del self._last_seen[entity_id]
            self.cache.discard(entity_id)
            self.trails.discard(entity_id)
        return len(expired)

    # -------------------------------------------------------------------------
    # Interpolation
    # -------------------------------------------------------------------------

    def tick(self) -> int:
        """Recompute all display positions for the current time."""
        if self._stopped:
            return 0
        return self.interpolator.tick(self.clock())

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def get_entities(self) -> List[Entity]:
        return self.store.get_all()

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self.store.get(entity_id)

    def get_trail(self, entity_id: str) -> Tuple[Position, ...]:
        return self.trails.snapshot(entity_id)

    def search(self, query: str) -> SearchResults:
        return self.ranker.search(query, self.store.get_all(), self.airports)

    def set_airports(self, airports: Sequence[ReferenceAirport]) -> None:
        """Install the reference dataset (loaded once at startup)."""
        self.airports = list(airports)
        self._airport_index = {}
        for airport in self.airports:
            for code in (airport.iata_code, airport.icao_code):
                if code:
                    self._airport_index.setdefault(code.upper(), airport)
        logger.info(f'{len(self.airports)} reference airports available for search')

    def find_airport(self, code: Optional[str]) -> Optional[ReferenceAirport]:
        """Resolve an IATA or ICAO route code to its reference airport."""
        if not code:
            return None
        return self._airport_index.get(code.strip().upper())

    @property
    def stats(self) -> dict:
        """Get engine statistics."""
        return {
            'status': self.status.to_dict(),
            'store': self.store.stats,
            'kinematic_cache_entries': len(self.cache),
            'trail_entries': len(self.trails),
            'interpolator': self.interpolator.stats,
            'fetch_loop': self._fetch_loop.stats if self._fetch_loop else {'running': False},
            'inflight_fetches': len(self._inflight),
            'airports': len(self.airports),
        }
