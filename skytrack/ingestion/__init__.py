"""
Data ingestion module for SkyTrack.

Handles polling the upstream telemetry APIs, normalizing their record
shapes into entities, and loading the reference airport dataset.
"""

from skytrack.ingestion.airlabs_client import AirLabsClient
from skytrack.ingestion.opensky_client import OpenSkyClient
from skytrack.ingestion.fetcher import Snapshot, SnapshotFetcher, create_client
from skytrack.ingestion.airports import load_airports

__all__ = [
    'AirLabsClient',
    'OpenSkyClient',
    'Snapshot',
    'SnapshotFetcher',
    'create_client',
    'load_airports',
]
