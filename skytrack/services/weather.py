"""
Weather service - current conditions at an aircraft's position.

Integrates with Open-Meteo (free, no API key) to get:
- Temperature and apparent temperature
- Humidity, pressure, cloud cover
- Wind speed and direction
- WMO weather code with a readable description

Uses caching per rounded coordinate to avoid hammering the API while a
selected aircraft moves. Lookups are best-effort: any failure returns None
and never affects tracking or search.
"""

import logging
import threading
import time
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple

import requests

from skytrack.config import config

logger = logging.getLogger(__name__)


# WMO weather interpretation codes: https://open-meteo.com/en/docs
WEATHER_CODES: Dict[int, Tuple[str, str]] = {
    0: ('Clear', 'clear sky'),
    1: ('Clear', 'mainly clear'),
    2: ('Clouds', 'partly cloudy'),
    3: ('Clouds', 'overcast'),
    45: ('Fog', 'fog'),
    48: ('Fog', 'depositing rime fog'),
    51: ('Drizzle', 'light drizzle'),
    53: ('Drizzle', 'moderate drizzle'),
    55: ('Drizzle', 'dense drizzle'),
    61: ('Rain', 'slight rain'),
    63: ('Rain', 'moderate rain'),
    65: ('Rain', 'heavy rain'),
    71: ('Snow', 'slight snow'),
    73: ('Snow', 'moderate snow'),
    75: ('Snow', 'heavy snow'),
    77: ('Snow', 'snow grains'),
    80: ('Rain', 'slight rain showers'),
    81: ('Rain', 'moderate rain showers'),
    82: ('Rain', 'violent rain showers'),
    85: ('Snow', 'slight snow showers'),
    86: ('Snow', 'heavy snow showers'),
    95: ('Thunderstorm', 'thunderstorm'),
    96: ('Thunderstorm', 'thunderstorm with slight hail'),
    99: ('Thunderstorm', 'thunderstorm with heavy hail'),
}

CURRENT_FIELDS = (
    'temperature_2m,relative_humidity_2m,apparent_temperature,precipitation,'
    'weather_code,cloud_cover,pressure_msl,surface_pressure,'
    'wind_speed_10m,wind_direction_10m'
)


def describe_weather_code(code: Optional[int]) -> Tuple[str, str]:
    """Map a WMO code to (main, description)."""
    try:
        key = int(code)
    except (TypeError, ValueError, OverflowError):
        return ('Unknown', 'unknown')
    return WEATHER_CODES.get(key, ('Unknown', 'unknown'))


@dataclass
class WeatherReport:
    """Current conditions at a point."""
    temperature: Optional[float]
    feels_like: Optional[float]
    humidity: Optional[float]
    pressure: Optional[float]
    wind_speed: Optional[float]  # m/s
    wind_direction: Optional[float]
    clouds: Optional[float]
    weather_code: Optional[int]
    weather_main: str
    weather_description: str

    def to_dict(self) -> dict:
        return asdict(self)


class WeatherService:
    """
    Service to fetch current weather from Open-Meteo.

    Thread-safe; called from HTTP worker threads, never from the engine
    loop.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url or config.weather.base_url
        self._cache_ttl = config.weather.cache_ttl_seconds if cache_ttl is None else cache_ttl
        self.session = session or requests.Session()

        # Cache: (lat, lon) rounded -> (WeatherReport, timestamp)
        self._cache: Dict[Tuple[float, float], Tuple[WeatherReport, float]] = {}
        self._lock = threading.RLock()

        self._requests = 0
        self._failures = 0

    @staticmethod
    def _cache_key(lat: float, lon: float) -> Tuple[float, float]:
        # ~11 km grid; conditions do not change meaningfully inside a cell
        return (round(lat, 1), round(lon, 1))

    def get_weather(self, lat: float, lon: float) -> Optional[WeatherReport]:
        """
        Get current weather at a coordinate.

        Returns cached data if fresh, otherwise fetches from the API.
        Returns None on any failure.
        """
        key = self._cache_key(lat, lon)

        cached = self._get_cached(key)
        if cached is not None:
            return cached

        report = self._fetch_from_api(lat, lon)
        if report is not None:
            self._set_cached(key, report)
        return report

    def _get_cached(self, key: Tuple[float, float]) -> Optional[WeatherReport]:
        """Get cached report if not expired."""
        with self._lock:
            if key in self._cache:
                report, timestamp = self._cache[key]
                if time.time() - timestamp < self._cache_ttl:
                    return report
                del self._cache[key]
        return None

    def _set_cached(self, key: Tuple[float, float], report: WeatherReport) -> None:
        """Cache a report."""
        with self._lock:
            self._cache[key] = (report, time.time())

            # Limit cache size
            if len(self._cache) > 500:
                sorted_items = sorted(self._cache.items(), key=lambda x: x[1][1])
                for cache_key, _ in sorted_items[:100]:
                    del self._cache[cache_key]

    def _fetch_from_api(self, lat: float, lon: float) -> Optional[WeatherReport]:
        """Fetch current conditions from Open-Meteo."""
        params = {
            'latitude': lat,
            'longitude': lon,
            'current': CURRENT_FIELDS,
            'wind_speed_unit': 'ms',
            'timezone': 'auto',
        }

        try:
            response = self.session.get(self.base_url, params=params, timeout=10)
            self._requests += 1

            if response.status_code != 200:
                self._failures += 1
                logger.warning(f'Open-Meteo API error: {response.status_code}')
                return None

            current = response.json().get('current') or {}

        except requests.RequestException as e:
            self._failures += 1
            logger.error(f'Failed to fetch weather: {e}')
            return None
        except ValueError as e:
            self._failures += 1
            logger.error(f'Error parsing weather response: {e}')
            return None

        if not current:
            logger.debug(f'No current weather for ({lat:.2f}, {lon:.2f})')
            return None

        code = current.get('weather_code')
        main, description = describe_weather_code(code)

        return WeatherReport(
            temperature=current.get('temperature_2m'),
            feels_like=current.get('apparent_temperature'),
            humidity=current.get('relative_humidity_2m'),
            pressure=current.get('pressure_msl') or current.get('surface_pressure'),
            wind_speed=current.get('wind_speed_10m'),
            wind_direction=current.get('wind_direction_10m'),
            clouds=current.get('cloud_cover'),
            weather_code=code,
            weather_main=main,
            weather_description=description,
        )

    @property
    def stats(self) -> dict:
        """Get service statistics."""
        with self._lock:
            return {
                'cache_size': len(self._cache),
                'requests': self._requests,
                'failures': self._failures,
            }
