"""
AirLabs flights API client.

Talks either to AirLabs directly (api_key set) or to a trusted
intermediary holding the key, such as the /api/upstream/flights proxy
route. Both return the same response shape:

    {"response": [ {flight}, ... ]}          on success
    {"error": {"message": ..., "code": ...}} on an application-level failure
"""

import logging
from typing import Any, List, Optional

import requests

from skytrack.config import config
from skytrack.exceptions import UpstreamError
from skytrack.ingestion.http import get_json
from skytrack.ingestion.sources import SOURCE_AIRLABS

logger = logging.getLogger(__name__)


class AirLabsClient:
    """Client for the AirLabs /flights endpoint."""

    source = SOURCE_AIRLABS

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = 'https://airlabs.co/api/v9',
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

        if not api_key:
            logger.info(f'AirLabs client without API key, expecting a proxy at {self.base_url}')

    @classmethod
    def from_config(cls) -> 'AirLabsClient':
        """Create client from application configuration."""
        return cls(
            api_key=config.upstream.airlabs_api_key,
            base_url=config.upstream.airlabs_base_url,
            timeout=config.upstream.request_timeout,
        )

    def get_raw_records(self) -> List[Any]:
        """
        Fetch the current flight list.

        Blocking; the engine runs it in a worker thread.

        Raises:
            UpstreamError on network/API errors
        """
        params = {'api_key': self.api_key} if self.api_key else None
        data = get_json(
            self.session, f'{self.base_url}/flights', self.source,
            params=params, timeout=self.timeout,
        )

        if not isinstance(data, dict):
            raise UpstreamError('AirLabs returned an unexpected payload', source=self.source)

        if data.get('error'):
            error = data['error']
            message = error.get('message') if isinstance(error, dict) else str(error)
            logger.error(f'AirLabs API error: {message}')
            raise UpstreamError(f'AirLabs API Error: {message}', source=self.source)

        records = data.get('response') or []
        logger.info(f'Received {len(records)} flights from AirLabs')
        return records
