"""
Reference airport loader.

Fetches the mwgg airports dataset (a JSON object keyed by ICAO code) once
at startup and flattens it into ReferenceAirport records. Records with
neither an IATA nor an ICAO code are discarded, as are records whose
coordinates do not parse.

Usage:
    from skytrack.ingestion.airports import load_airports

    airports = load_airports()
    print(airports[0].iata_code)  # 'JFK'
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import requests

from skytrack.config import config
from skytrack.exceptions import ReferenceDataError, UpstreamError
from skytrack.ingestion.http import get_json
from skytrack.models import ReferenceAirport

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def parse_airport(raw: Any) -> Optional[ReferenceAirport]:
    """
    Parse one dataset record.

    Returns None when the record has no code or unusable coordinates.
    """
    if not isinstance(raw, dict):
        return None

    icao = _text(raw.get('icao')).upper()
    iata = _text(raw.get('iata')).upper()
    if not icao and not iata:
        return None

    try:
        latitude = float(raw.get('lat'))
        longitude = float(raw.get('lon'))
    except (TypeError, ValueError):
        return None

    return ReferenceAirport(
        icao_code=icao,
        iata_code=iata,
        name=_text(raw.get('name')),
        city=_text(raw.get('city')),
        country=_text(raw.get('country')),
        latitude=latitude,
        longitude=longitude,
    )


def flatten_airports(data: Any) -> List[ReferenceAirport]:
    """Flatten the keyed dataset (or a plain list) into airport records."""
    if isinstance(data, dict):
        records = data.values()
    elif isinstance(data, list):
        records = data
    else:
        raise ReferenceDataError('Airport dataset must be a JSON object or array')

    airports = []
    discarded = 0
    for raw in records:
        airport = parse_airport(raw)
        if airport is None:
            discarded += 1
            continue
        airports.append(airport)

    if discarded:
        logger.debug(f'Discarded {discarded} airport records without code or coordinates')

    return airports


def load_airports(
    path: Optional[str] = None,
    url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> List[ReferenceAirport]:
    """
    Load the reference airport dataset.

    A local path takes precedence over the URL.

    Raises:
        ReferenceDataError if the dataset cannot be read
    """
    path = path or config.airports.path
    url = url or config.airports.url

    if path:
        dataset = Path(path)
        logger.info(f'Loading airports from {dataset}')
        try:
            with open(dataset, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ReferenceDataError(f'Cannot read airport dataset {dataset}: {e}') from e
    else:
        logger.info(f'Loading airports from {url}')
        try:
            data = get_json(
                session or requests.Session(), url, 'airports',
                timeout=config.upstream.request_timeout,
            )
        except UpstreamError as e:
            raise ReferenceDataError(f'Cannot fetch airport dataset: {e}') from e

    airports = flatten_airports(data)
    logger.info(f'Loaded {len(airports)} reference airports')
    return airports
