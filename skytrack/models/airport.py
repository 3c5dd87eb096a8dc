"""
ReferenceAirport model - static reference data for airport lookups.

Loaded once at startup and never mutated. Either code may be empty, but
records carrying neither are discarded by the loader.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceAirport:
    """
    Airport record from the reference dataset.

    Fields:
        icao_code: 4-letter ICAO code (e.g., 'KJFK'), may be empty
        iata_code: 3-letter IATA code (e.g., 'JFK'), may be empty
        name: Airport name
        city: Served city
        country: ISO country code or name, as the dataset reports it
    """
    icao_code: str
    iata_code: str
    name: str
    city: str
    country: str
    latitude: float
    longitude: float

    def __repr__(self) -> str:
        return f'<ReferenceAirport {self.iata_code or self.icao_code} {self.name}>'

    @property
    def display_code(self) -> str:
        """Return best available code for display."""
        return self.iata_code or self.icao_code

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'icao': self.icao_code,
            'iata': self.iata_code,
            'name': self.name,
            'city': self.city,
            'country': self.country,
            'latitude': self.latitude,
            'longitude': self.longitude,
        }
