"""
API module for SkyTrack.

Provides REST endpoints for:
- Flight data (interpolated positions, trails)
- Search over flights and airports
- Weather at a point or flight
- System status
- The credential-holding upstream proxy
"""

from skytrack.api.flights import flights_bp
from skytrack.api.proxy import proxy_bp
from skytrack.api.search import search_bp
from skytrack.api.status import status_bp
from skytrack.api.weather import weather_bp

__all__ = ['flights_bp', 'proxy_bp', 'search_bp', 'status_bp', 'weather_bp']
