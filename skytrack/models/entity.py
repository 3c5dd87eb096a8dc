"""
Entity model - the tracked aircraft as held by the entity store.

One Entity per transponder id and snapshot. Everything except
display_position is fixed at merge time; display_position is rewritten
by the interpolator on every tick from the same kinematic anchor.

Units are SI throughout (m, m/s, degrees). Conversion from the various
upstream units happens at the normalization boundary only.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

# Display sentinels for metadata the upstream did not report
NOT_AVAILABLE = 'N/A'
UNKNOWN_COUNTRY = 'Unknown'
UNKNOWN_AIRLINE = 'Unknown Airline'
UNKNOWN_AIRCRAFT = 'Unknown Aircraft'


class Position(NamedTuple):
    """WGS84 position in decimal degrees."""
    longitude: float
    latitude: float


class Kinematics(NamedTuple):
    """
    Motion state captured with a snapshot.

    ground_speed: m/s
    heading: degrees, 0 = north, clockwise
    vertical_rate: m/s, positive = climb
    """
    ground_speed: float = 0.0
    heading: float = 0.0
    vertical_rate: float = 0.0


class Route(NamedTuple):
    """Origin/destination airport codes (IATA preferred, ICAO fallback)."""
    origin_code: Optional[str] = None
    destination_code: Optional[str] = None


@dataclass
class Entity:
    """
    Current state of a tracked aircraft.

    Fields:
        id: Hex transponder address, or a synthesized fallback
        reported_position: Position from the last snapshot
        display_position: Dead-reckoned position, owned by the interpolator
        kinematics: Speed/heading/vertical rate at snapshot time
        snapshot_timestamp: Unix time the snapshot was received
    """
    id: str
    reported_position: Position
    kinematics: Kinematics
    snapshot_timestamp: float

    callsign: str = NOT_AVAILABLE
    origin_country: str = UNKNOWN_COUNTRY
    airline: str = UNKNOWN_AIRLINE
    aircraft_type: str = UNKNOWN_AIRCRAFT
    registration: str = NOT_AVAILABLE
    flight_number: str = NOT_AVAILABLE

    altitude: float = 0.0
    route: Optional[Route] = None
    on_ground: bool = False
    source: str = ''

    display_position: Optional[Position] = field(default=None, compare=False)

    def __post_init__(self):
        if self.display_position is None:
            self.display_position = self.reported_position

    def __repr__(self) -> str:
        return f'<Entity {self.id} {self.callsign} @ {self.altitude:.0f}m>'

    # -------------------------------------------------------------------------
    # Display helpers - convert to human-friendly units
    # -------------------------------------------------------------------------

    @property
    def altitude_ft(self) -> int:
        """Altitude in feet."""
        return int(self.altitude * 3.28084)

    @property
    def flight_level(self) -> Optional[str]:
        """Flight level string (e.g., 'FL350')."""
        alt_ft = self.altitude_ft
        if alt_ft < 18000:
            return None
        return f'FL{alt_ft // 100}'

    @property
    def speed_kts(self) -> int:
        """Ground speed in knots."""
        return int(self.kinematics.ground_speed * 1.94384)

    @property
    def vertical_rate_fpm(self) -> int:
        """Vertical rate in feet per minute."""
        return int(self.kinematics.vertical_rate * 196.85)

    @property
    def heading_display(self) -> int:
        """Heading rounded to nearest degree."""
        return int(self.kinematics.heading) % 360

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'id': self.id,
            'callsign': self.callsign,
            'origin_country': self.origin_country,
            'airline': self.airline,
            'aircraft_type': self.aircraft_type,
            'registration': self.registration,
            'flight_number': self.flight_number,
            'position': {
                'longitude': self.display_position.longitude,
                'latitude': self.display_position.latitude,
                'reported_longitude': self.reported_position.longitude,
                'reported_latitude': self.reported_position.latitude,
            },
            'telemetry': {
                'altitude_ft': self.altitude_ft,
                'flight_level': self.flight_level,
                'speed_kts': self.speed_kts,
                'heading': self.heading_display,
                'vertical_rate_fpm': self.vertical_rate_fpm,
            },
            'route': {
                'origin': self.route.origin_code,
                'destination': self.route.destination_code,
            } if self.route else None,
            'on_ground': self.on_ground,
            'source': self.source,
            'snapshot_timestamp': self.snapshot_timestamp,
        }
