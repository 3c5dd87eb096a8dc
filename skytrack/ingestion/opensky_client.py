"""
OpenSky Network API client.

Polls /states/all, optionally authenticated and optionally restricted to
the OPENSKY_BBOX region, and keeps to the provider's request spacing.

Returns raw state vector arrays; parsing lives in ingestion.sources.
"""

import logging
import time
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from skytrack.config import config
from skytrack.ingestion.http import get_json
from skytrack.ingestion.sources import SOURCE_OPENSKY

logger = logging.getLogger(__name__)


class BoundingBox(NamedTuple):
    """Query region in degrees, in OpenSky's lamin/lomin/lamax/lomax order."""
    lamin: float
    lomin: float
    lamax: float
    lomax: float

    @classmethod
    def from_bounds(cls, bounds: Optional[Tuple[float, float, float, float]]) -> Optional['BoundingBox']:
        return cls(*bounds) if bounds else None

    def to_params(self) -> Dict[str, float]:
        return self._asdict()


class OpenSkyClient:
    """
    Client for OpenSky Network API.

    Handles:
    - GET requests to /states/all endpoint
    - Optional authentication for higher rate limits
    - Optional region filtering (OPENSKY_BBOX)
    - Rate limiting (internal tracking)
    """

    source = SOURCE_OPENSKY

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        bbox: Optional[BoundingBox] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.bbox = bbox
        self.timeout = timeout
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky client initialized with authentication')
        else:
            logger.warning('OpenSky client running without authentication (lower rate limits)')
        if bbox:
            logger.info(f'OpenSky queries limited to {tuple(bbox)}')

        self.session = session or requests.Session()
        self.last_request_time: float = 0
        self._min_interval = 5.0 if self.auth else 10.0

    @classmethod
    def from_config(cls) -> 'OpenSkyClient':
        """Create client from application configuration."""
        return cls(
            username=config.upstream.opensky_username,
            password=config.upstream.opensky_password,
            base_url=config.upstream.opensky_base_url,
            bbox=BoundingBox.from_bounds(config.upstream.opensky_bounds),
            timeout=config.upstream.request_timeout,
        )

    def _wait_for_rate_limit(self) -> None:
        """
        Enforce minimum interval between requests.

        OpenSky rate limits:
        - Anonymous: ~10 seconds between requests
        - Authenticated: ~5 seconds between requests
        """
        elapsed = time.time() - self.last_request_time
        if elapsed < self._min_interval:
            sleep_time = self._min_interval - elapsed
            logger.debug(f'Rate limiting: sleeping {sleep_time:.1f}s')
            time.sleep(sleep_time)

    def get_raw_records(self) -> List[Any]:
        """
        Fetch current state vectors from OpenSky.

        Blocking; the engine runs it in a worker thread.

        Returns:
            Raw state vector arrays in upstream order

        Raises:
            UpstreamError on network/API errors
        """
        self._wait_for_rate_limit()

        url = f'{self.base_url}/states/all'
        params = self.bbox.to_params() if self.bbox else {}

        logger.debug(f'Fetching states: {url} params={params}')

        try:
            data = get_json(
                self.session, url, self.source,
                params=params, auth=self.auth, timeout=self.timeout,
            )
        finally:
            self.last_request_time = time.time()

        states_raw = (data.get('states') if isinstance(data, dict) else None) or []

        logger.info(f'Received {len(states_raw)} state vectors from OpenSky')
        return states_raw
