"""
Shared HTTP plumbing for upstream clients.

Maps every requests failure onto UpstreamError so callers only have one
exception type to recover from.
"""

import logging
from typing import Any, Optional

import requests

from skytrack.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def get_json(
    session: requests.Session,
    url: str,
    source: str,
    params: Optional[dict] = None,
    auth: Any = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    GET a JSON document.

    Raises:
        UpstreamError on network errors, non-2xx status, or invalid JSON
    """
    try:
        response = session.get(url, params=params, auth=auth, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.error(f'{source} API timeout')
        raise UpstreamError(f'{source} request timed out', source=source) from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 429:
            logger.warning(f'{source} rate limit exceeded')
        else:
            logger.error(f'{source} API error: {status}')
        reason = e.response.reason if e.response is not None else ''
        raise UpstreamError(
            f'{source} API Error: {status} {reason}'.strip(),
            status_code=status,
            source=source,
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f'{source} request failed: {e}')
        raise UpstreamError(f'{source} request failed: {e}', source=source) from e

    try:
        return response.json()
    except ValueError as e:
        logger.error(f'{source} returned invalid JSON: {e}')
        raise UpstreamError(f'{source} returned invalid JSON', source=source) from e
