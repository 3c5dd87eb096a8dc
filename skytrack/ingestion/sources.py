"""
Upstream record shapes and their normalization into Entity.

Each supported telemetry provider has one record variant with an explicit
mapping into the single internal Entity type. Missing or unparseable
optional fields resolve to documented defaults here and nowhere else.

Unit conventions (internal model is SI):
    AirLabs   speed     km/h -> m/s  (/ 3.6)
              v_speed   km/h -> m/s  (/ 3.6)
              alt       m
    OpenSky   velocity  m/s
              vertical_rate m/s
              baro_altitude m

AirLabs record (JSON object, fields used):
    hex, reg_number, flag, lat, lng, alt, dir, speed, v_speed,
    flight_number, flight_icao, flight_iata, dep_iata, dep_icao,
    arr_iata, arr_icao, airline_iata, airline_icao, aircraft_icao, status

OpenSky state vector format (array indices):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM
"""

import math
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from skytrack.models import (
    Entity,
    Kinematics,
    Position,
    Route,
    NOT_AVAILABLE,
    UNKNOWN_AIRCRAFT,
    UNKNOWN_AIRLINE,
    UNKNOWN_COUNTRY,
)

KMH_TO_MPS = 1 / 3.6

SOURCE_AIRLABS = 'airlabs'
SOURCE_OPENSKY = 'opensky'


# Airline display names, keyed by both IATA and ICAO code
AIRLINE_NAMES: Dict[str, str] = {
    'UA': 'United Airlines', 'UAL': 'United Airlines',
    'BA': 'British Airways', 'BAW': 'British Airways',
    'AF': 'Air France', 'AFR': 'Air France',
    'LH': 'Lufthansa', 'DLH': 'Lufthansa',
    'EK': 'Emirates', 'UAE': 'Emirates',
    'AA': 'American Airlines', 'AAL': 'American Airlines',
    'DL': 'Delta Air Lines', 'DAL': 'Delta Air Lines',
    'WN': 'Southwest Airlines', 'SWA': 'Southwest Airlines',
    'KL': 'KLM Royal Dutch', 'KLM': 'KLM Royal Dutch',
    'QF': 'Qantas Airways', 'QFA': 'Qantas Airways',
    'TK': 'Turkish Airlines', 'THY': 'Turkish Airlines',
    'FR': 'Ryanair', 'RYR': 'Ryanair',
    'U2': 'EasyJet', 'EZY': 'EasyJet',
    'VY': 'Vueling Airlines', 'VLG': 'Vueling Airlines',
    'FX': 'FedEx Express', 'FDX': 'FedEx Express',
    '5X': 'UPS Airlines', 'UPS': 'UPS Airlines',
    'SQ': 'Singapore Airlines', 'SIA': 'Singapore Airlines',
    'QR': 'Qatar Airways', 'QTR': 'Qatar Airways',
    'ET': 'Ethiopian Airlines', 'ETH': 'Ethiopian Airlines',
    'AC': 'Air Canada', 'ACA': 'Air Canada',
    'B6': 'JetBlue Airways', 'JBU': 'JetBlue Airways',
    'AS': 'Alaska Airlines', 'ASA': 'Alaska Airlines',
    'NH': 'All Nippon Airways', 'ANA': 'All Nippon Airways',
    'JL': 'Japan Airlines', 'JAL': 'Japan Airlines',
    'CX': 'Cathay Pacific', 'CPA': 'Cathay Pacific',
}


# Common aircraft type codes
AIRCRAFT_TYPES: Dict[str, str] = {
    'A220': 'Airbus A220',
    'A319': 'Airbus A319',
    'A320': 'Airbus A320',
    'A20N': 'Airbus A320neo',
    'A321': 'Airbus A321',
    'A21N': 'Airbus A321neo',
    'A332': 'Airbus A330-200',
    'A333': 'Airbus A330-300',
    'A359': 'Airbus A350-900',
    'A35K': 'Airbus A350-1000',
    'A388': 'Airbus A380-800',
    'B737': 'Boeing 737',
    'B738': 'Boeing 737-800',
    'B739': 'Boeing 737-900',
    'B38M': 'Boeing 737 MAX 8',
    'B39M': 'Boeing 737 MAX 9',
    'B744': 'Boeing 747-400',
    'B748': 'Boeing 747-8',
    'B752': 'Boeing 757-200',
    'B763': 'Boeing 767-300',
    'B777': 'Boeing 777',
    'B772': 'Boeing 777-200',
    'B77W': 'Boeing 777-300ER',
    'B788': 'Boeing 787-8 Dreamliner',
    'B789': 'Boeing 787-9 Dreamliner',
    'B78X': 'Boeing 787-10 Dreamliner',
    'CRJ9': 'Bombardier CRJ-900',
    'E175': 'Embraer E175',
    'E190': 'Embraer E190',
    'E195': 'Embraer E195',
    'AT76': 'ATR 72-600',
    'DH8D': 'Dash 8-400',
}


def _to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Parse a number the way upstream JSON may encode it (number or string).

    NaN and infinities count as missing.
    """
    if value is None or value == '':
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _clean(value: Any) -> Optional[str]:
    """Strip a string field, mapping blanks to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_airline(iata: Optional[str], icao: Optional[str], name: Optional[str] = None) -> str:
    """Airline display name from code tables, upstream name, or sentinel."""
    code = iata or icao
    if not code:
        return UNKNOWN_AIRLINE
    return AIRLINE_NAMES.get(code.upper()) or name or UNKNOWN_AIRLINE


def resolve_aircraft_type(code: Optional[str]) -> str:
    """Aircraft type description, falling back to the raw code."""
    if not code:
        return UNKNOWN_AIRCRAFT
    return AIRCRAFT_TYPES.get(code.upper(), code)


def synthesize_id(*candidates: Optional[str]) -> str:
    """
    Build a fallback merge key for records without a transponder address.

    Uses the first available candidate so the key stays stable across
    snapshots; only records with nothing usable get a random token.
    """
    for candidate in candidates:
        if candidate:
            return f'FLIGHT-{candidate.upper()}'
    return f'FLIGHT-{secrets.token_hex(4)}'


@dataclass
class AirLabsFlight:
    """
    Parsed flight record from the AirLabs /flights endpoint.

    Speeds are kept in upstream units (km/h) until to_entity().
    """
    hex: Optional[str]
    reg_number: Optional[str]
    flag: Optional[str]
    lat: Optional[float]
    lng: Optional[float]
    alt: Optional[float]
    dir: Optional[float]
    speed: Optional[float]
    v_speed: Optional[float]
    flight_number: Optional[str]
    flight_icao: Optional[str]
    flight_iata: Optional[str]
    dep_iata: Optional[str]
    dep_icao: Optional[str]
    arr_iata: Optional[str]
    arr_icao: Optional[str]
    airline_iata: Optional[str]
    airline_icao: Optional[str]
    airline_name: Optional[str]
    aircraft_icao: Optional[str]
    status: Optional[str]

    source = SOURCE_AIRLABS

    @classmethod
    def from_dict(cls, raw: Any) -> Optional['AirLabsFlight']:
        """
        Parse an AirLabs flight object.

        Returns None if the record is not an object at all.
        """
        if not isinstance(raw, dict):
            return None

        return cls(
            hex=_clean(raw.get('hex')),
            reg_number=_clean(raw.get('reg_number')),
            flag=_clean(raw.get('flag')),
            lat=_to_float(raw.get('lat')),
            lng=_to_float(raw.get('lng')),
            alt=_to_float(raw.get('alt')),
            dir=_to_float(raw.get('dir')),
            speed=_to_float(raw.get('speed')),
            v_speed=_to_float(raw.get('v_speed')),
            flight_number=_clean(raw.get('flight_number')),
            flight_icao=_clean(raw.get('flight_icao')),
            flight_iata=_clean(raw.get('flight_iata')),
            dep_iata=_clean(raw.get('dep_iata')),
            dep_icao=_clean(raw.get('dep_icao')),
            arr_iata=_clean(raw.get('arr_iata')),
            arr_icao=_clean(raw.get('arr_icao')),
            airline_iata=_clean(raw.get('airline_iata')),
            airline_icao=_clean(raw.get('airline_icao')),
            airline_name=_clean(raw.get('airline_name')),
            aircraft_icao=_clean(raw.get('aircraft_icao')),
            status=_clean(raw.get('status')),
        )

    def is_trackable(self) -> bool:
        """In flight with a usable position."""
        if self.lat is None or self.lng is None:
            return False
        return (self.status or '').lower() != 'landed'

    def to_entity(self, snapshot_timestamp: float) -> Entity:
        """Map into the internal Entity, converting km/h to m/s."""
        entity_id = self.hex.lower() if self.hex else synthesize_id(
            self.reg_number, self.flight_icao, self.flight_iata,
        )

        origin = self.dep_iata or self.dep_icao
        destination = self.arr_iata or self.arr_icao
        route = Route(origin, destination) if origin or destination else None

        return Entity(
            id=entity_id,
            reported_position=Position(self.lng, self.lat),
            kinematics=Kinematics(
                ground_speed=(self.speed or 0.0) * KMH_TO_MPS,
                heading=self.dir or 0.0,
                vertical_rate=(self.v_speed or 0.0) * KMH_TO_MPS,
            ),
            snapshot_timestamp=snapshot_timestamp,
            callsign=self.flight_icao or self.flight_iata or self.flight_number or NOT_AVAILABLE,
            origin_country=self.flag or UNKNOWN_COUNTRY,
            airline=resolve_airline(self.airline_iata, self.airline_icao, self.airline_name),
            aircraft_type=resolve_aircraft_type(self.aircraft_icao),
            registration=self.reg_number or NOT_AVAILABLE,
            flight_number=self.flight_number or self.flight_iata or NOT_AVAILABLE,
            altitude=self.alt or 0.0,
            route=route,
            on_ground=(self.status or '').lower() == 'landed',
            source=self.source,
        )


@dataclass
class StateVector:
    """
    Parsed state vector from OpenSky API.

    Normalizes the raw array format into a typed dataclass.
    All values may be None if not reported by the aircraft.
    """
    icao24: str
    callsign: Optional[str]
    origin_country: Optional[str]
    time_position: Optional[int]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]
    vertical_rate: Optional[float]
    geo_altitude: Optional[float]
    squawk: Optional[str]

    source = SOURCE_OPENSKY

    @classmethod
    def from_array(cls, arr: Any) -> Optional['StateVector']:
        """
        Parse OpenSky state vector array into StateVector object.

        Returns None if the array is malformed or missing required fields.
        """
        if not isinstance(arr, (list, tuple)) or len(arr) < 17:
            return None

        icao24 = arr[0]
        if not icao24 or not isinstance(icao24, str):
            return None

        return cls(
            icao24=icao24.strip().lower(),
            callsign=_clean(arr[1]),
            origin_country=_clean(arr[2]),
            time_position=arr[3],
            last_contact=arr[4],
            longitude=_to_float(arr[5]),
            latitude=_to_float(arr[6]),
            baro_altitude=_to_float(arr[7]),
            on_ground=bool(arr[8]),
            velocity=_to_float(arr[9]),
            true_track=_to_float(arr[10]),
            vertical_rate=_to_float(arr[11]),
            geo_altitude=_to_float(arr[13]),
            squawk=_clean(arr[14]),
        )

    def has_position(self) -> bool:
        """Check if this state has valid position data."""
        return self.latitude is not None and self.longitude is not None

    def is_trackable(self) -> bool:
        """Airborne with a usable position."""
        return self.has_position() and not self.on_ground

    def to_entity(self, snapshot_timestamp: float) -> Entity:
        """Map into the internal Entity; OpenSky already reports SI units."""
        airline_icao = self.callsign[:3].upper() if self.callsign and len(self.callsign) >= 3 else None
        airline = AIRLINE_NAMES.get(airline_icao, UNKNOWN_AIRLINE) if airline_icao else UNKNOWN_AIRLINE

        return Entity(
            id=self.icao24,
            reported_position=Position(self.longitude, self.latitude),
            kinematics=Kinematics(
                ground_speed=self.velocity or 0.0,
                heading=self.true_track or 0.0,
                vertical_rate=self.vertical_rate or 0.0,
            ),
            snapshot_timestamp=snapshot_timestamp,
            callsign=self.callsign or NOT_AVAILABLE,
            origin_country=self.origin_country or UNKNOWN_COUNTRY,
            airline=airline,
            altitude=self.baro_altitude if self.baro_altitude is not None else (self.geo_altitude or 0.0),
            on_ground=self.on_ground,
            source=self.source,
        )


UpstreamRecord = Union[AirLabsFlight, StateVector]

# One parser per upstream variant; each returns None for malformed input
RECORD_PARSERS: Dict[str, Callable[[Any], Optional[UpstreamRecord]]] = {
    SOURCE_AIRLABS: AirLabsFlight.from_dict,
    SOURCE_OPENSKY: StateVector.from_array,
}


def parse_records(source: str, raw_records: List[Any]) -> List[Optional[UpstreamRecord]]:
    """Parse raw upstream records; malformed entries come back as None."""
    parser = RECORD_PARSERS[source]
    return [parser(raw) for raw in raw_records]
