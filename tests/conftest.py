"""Shared fixtures for SkyTrack tests."""

import pytest

from skytrack.exceptions import UpstreamError
from skytrack.models import Entity, Kinematics, Position, ReferenceAirport


@pytest.fixture
def anyio_backend():
    return 'asyncio'


def make_entity(
    entity_id='abc123',
    lon=0.0,
    lat=0.0,
    speed=0.0,
    heading=0.0,
    timestamp=1000.0,
    **kwargs,
) -> Entity:
    """Entity with sensible defaults; keyword overrides go straight through."""
    return Entity(
        id=entity_id,
        reported_position=Position(lon, lat),
        kinematics=Kinematics(ground_speed=speed, heading=heading),
        snapshot_timestamp=timestamp,
        **kwargs,
    )


def make_airport(iata='JFK', icao='KJFK', name='John F Kennedy International Airport',
                 city='New York', country='US', lat=40.6398, lon=-73.7789) -> ReferenceAirport:
    return ReferenceAirport(
        icao_code=icao,
        iata_code=iata,
        name=name,
        city=city,
        country=country,
        latitude=lat,
        longitude=lon,
    )


def airlabs_record(hex_code='4ca7b5', lat=51.47, lng=-0.45, **kwargs) -> dict:
    """Raw AirLabs /flights record."""
    record = {
        'hex': hex_code,
        'reg_number': 'G-EUUA',
        'flag': 'GB',
        'lat': lat,
        'lng': lng,
        'alt': 10000,
        'dir': 90,
        'speed': 720,
        'v_speed': 0,
        'flight_number': '123',
        'flight_icao': 'BAW123',
        'flight_iata': 'BA123',
        'dep_iata': 'LHR',
        'dep_icao': 'EGLL',
        'arr_iata': 'JFK',
        'arr_icao': 'KJFK',
        'airline_iata': 'BA',
        'airline_icao': 'BAW',
        'aircraft_icao': 'A320',
        'status': 'en-route',
    }
    record.update(kwargs)
    return record


class FakeClient:
    """
    Upstream client returning queued payloads.

    Each queued item is either a list of raw records or an exception to
    raise.
    """

    def __init__(self, *payloads, source='airlabs'):
        self.source = source
        self.payloads = list(payloads)
        self.calls = 0

    def get_raw_records(self):
        self.calls += 1
        payload = self.payloads.pop(0) if self.payloads else []
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture
def upstream_down():
    return UpstreamError('airlabs request failed: connection refused', source='airlabs')
