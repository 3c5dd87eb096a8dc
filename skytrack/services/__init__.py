"""
Services module for SkyTrack.

External API integrations used by the presentation layer.
"""

from skytrack.services.weather import WeatherReport, WeatherService

__all__ = ['WeatherReport', 'WeatherService']
