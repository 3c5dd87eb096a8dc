"""
Configuration management for SkyTrack.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from skytrack.exceptions import ConfigError

load_dotenv()


# Poll window the upstream providers tolerate
MIN_POLL_INTERVAL = 5
MAX_POLL_INTERVAL = 45

KNOWN_SOURCES = ('airlabs', 'opensky')


def parse_bounds(text: str) -> Tuple[float, float, float, float]:
    """
    Parse an OPENSKY_BBOX value: "lamin,lomin,lamax,lomax" in degrees.

    Raises ConfigError when the box is not four numbers or is inverted.
    """
    parts = [part.strip() for part in text.split(',')]
    if len(parts) != 4:
        raise ConfigError(f'OPENSKY_BBOX needs lamin,lomin,lamax,lomax, got {text!r}')
    try:
        lamin, lomin, lamax, lomax = (float(part) for part in parts)
    except ValueError:
        raise ConfigError(f'OPENSKY_BBOX must be numeric, got {text!r}') from None

    if not (-90 <= lamin < lamax <= 90 and -180 <= lomin < lomax <= 180):
        raise ConfigError(f'OPENSKY_BBOX is out of range or inverted: {text!r}')
    return lamin, lomin, lamax, lomax


@dataclass(frozen=True)
class UpstreamConfig:
    """Upstream telemetry source configuration."""
    source: str = os.getenv('UPSTREAM_SOURCE', 'airlabs').lower()

    airlabs_api_key: Optional[str] = os.getenv('AIRLABS_API_KEY') or None
    airlabs_base_url: str = os.getenv('AIRLABS_BASE_URL', 'https://airlabs.co/api/v9')

    opensky_username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    opensky_password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    opensky_base_url: str = os.getenv('OPENSKY_BASE_URL', 'https://opensky-network.org/api')
    # lamin,lomin,lamax,lomax; unset queries the whole globe
    opensky_bbox: Optional[str] = os.getenv('OPENSKY_BBOX') or None

    request_timeout: float = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '30'))

    @property
    def is_airlabs_configured(self) -> bool:
        return bool(self.airlabs_api_key)

    @property
    def is_opensky_authenticated(self) -> bool:
        return bool(self.opensky_username and self.opensky_password)

    @property
    def opensky_bounds(self) -> Optional[Tuple[float, float, float, float]]:
        return parse_bounds(self.opensky_bbox) if self.opensky_bbox else None


@dataclass(frozen=True)
class FetchConfig:
    """Snapshot polling settings."""
    poll_interval: int = int(os.getenv('POLL_INTERVAL_SECONDS', '10'))

    # Upstream order is priority; everything past this is dropped
    max_entities: int = int(os.getenv('MAX_ENTITIES', '1000'))

    # Cache and trail entries of ids missing this many accepted snapshots are dropped
    evict_after_cycles: int = int(os.getenv('EVICT_AFTER_CYCLES', '6'))


@dataclass(frozen=True)
class InterpolationConfig:
    """Dead-reckoning settings."""
    tick_hz: float = float(os.getenv('TICK_HZ', '60'))
    staleness_ceiling: float = float(os.getenv('STALENESS_CEILING_SECONDS', '30'))
    meters_per_degree: float = 111320.0

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_hz


@dataclass(frozen=True)
class TrailConfig:
    """Per-aircraft trail settings."""
    max_points: int = 50
    epsilon_degrees: float = 0.001


@dataclass(frozen=True)
class SearchConfig:
    """Search ranking settings."""
    min_query_length: int = int(os.getenv('SEARCH_MIN_QUERY_LENGTH', '2'))
    top_n: int = 5


@dataclass(frozen=True)
class AirportsConfig:
    """Reference airport dataset location."""
    url: str = os.getenv(
        'AIRPORTS_URL',
        'https://raw.githubusercontent.com/mwgg/Airports/master/airports.json',
    )
    # Local copy takes precedence over the URL when set
    path: Optional[str] = os.getenv('AIRPORTS_PATH') or None


@dataclass(frozen=True)
class WeatherConfig:
    """Open-Meteo weather lookup settings."""
    base_url: str = os.getenv('WEATHER_BASE_URL', 'https://api.open-meteo.com/v1/forecast')
    cache_ttl_seconds: int = int(os.getenv('WEATHER_CACHE_TTL_SECONDS', '300'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    upstream: UpstreamConfig
    fetch: FetchConfig
    interpolation: InterpolationConfig
    trail: TrailConfig
    search: SearchConfig
    airports: AirportsConfig
    weather: WeatherConfig

    # Flask settings
    secret_key: str = 'dev-key-change-in-prod'
    debug: bool = False


def validate_config(cfg: AppConfig) -> AppConfig:
    """Reject settings the engine cannot run with."""
    if cfg.upstream.source not in KNOWN_SOURCES:
        raise ConfigError(f'Unknown UPSTREAM_SOURCE: {cfg.upstream.source!r}')

    if cfg.upstream.opensky_bbox:
        parse_bounds(cfg.upstream.opensky_bbox)

    if not MIN_POLL_INTERVAL <= cfg.fetch.poll_interval <= MAX_POLL_INTERVAL:
        raise ConfigError(
            f'POLL_INTERVAL_SECONDS must be between {MIN_POLL_INTERVAL} and '
            f'{MAX_POLL_INTERVAL}, got {cfg.fetch.poll_interval}'
        )

    if cfg.fetch.max_entities <= 0:
        raise ConfigError('MAX_ENTITIES must be positive')

    if cfg.interpolation.tick_hz <= 0:
        raise ConfigError('TICK_HZ must be positive')

    return cfg


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return validate_config(AppConfig(
        upstream=UpstreamConfig(),
        fetch=FetchConfig(),
        interpolation=InterpolationConfig(),
        trail=TrailConfig(),
        search=SearchConfig(),
        airports=AirportsConfig(),
        weather=WeatherConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    ))


# Singleton instance
config = load_config()
