"""Tests for the weather service."""

from unittest.mock import MagicMock

import requests

from skytrack.services import WeatherService
from skytrack.services.weather import describe_weather_code

CURRENT = {
    'current': {
        'temperature_2m': 12.4,
        'relative_humidity_2m': 81,
        'apparent_temperature': 10.9,
        'weather_code': 61,
        'cloud_cover': 100,
        'pressure_msl': 1009.8,
        'wind_speed_10m': 6.2,
        'wind_direction_10m': 240,
    }
}


def mock_session(payload=CURRENT, status_code=200):
    session = MagicMock(spec=requests.Session)
    session.get.return_value.status_code = status_code
    session.get.return_value.json.return_value = payload
    return session


class TestWeatherService:
    """Tests for WeatherService."""

    def test_parses_current_conditions(self):
        service = WeatherService(base_url='https://weather.test', session=mock_session())
        report = service.get_weather(51.47, -0.45)

        assert report.temperature == 12.4
        assert report.humidity == 81
        assert report.wind_speed == 6.2
        assert report.weather_main == 'Rain'
        assert report.weather_description == 'slight rain'

    def test_cached_per_grid_cell(self):
        session = mock_session()
        service = WeatherService(base_url='https://weather.test', cache_ttl=300, session=session)

        service.get_weather(51.47, -0.47)
        service.get_weather(51.46, -0.48)
        assert session.get.call_count == 1
        assert service.stats['cache_size'] == 1

    def test_non_200_returns_none(self):
        service = WeatherService(session=mock_session(status_code=500))
        assert service.get_weather(0.0, 0.0) is None
        assert service.stats['failures'] == 1

    def test_network_error_returns_none(self):
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.exceptions.ConnectionError('offline')
        assert WeatherService(session=session).get_weather(0.0, 0.0) is None

    def test_failures_not_cached(self):
        session = mock_session(status_code=500)
        service = WeatherService(session=session)
        service.get_weather(0.0, 0.0)
        service.get_weather(0.0, 0.0)
        assert session.get.call_count == 2

    def test_unknown_code(self):
        assert describe_weather_code(1234) == ('Unknown', 'unknown')
        assert describe_weather_code(None) == ('Unknown', 'unknown')
        assert describe_weather_code(0) == ('Clear', 'clear sky')

    def test_non_numeric_code(self):
        assert describe_weather_code('abc') == ('Unknown', 'unknown')
        assert describe_weather_code(float('inf')) == ('Unknown', 'unknown')
        assert describe_weather_code('61') == ('Rain', 'slight rain')

    def test_non_numeric_code_still_reports(self):
        """A garbled condition code degrades to Unknown instead of failing."""
        payload = {'current': dict(CURRENT['current'], weather_code='abc')}
        service = WeatherService(base_url='https://weather.test', session=mock_session(payload))
        report = service.get_weather(51.47, -0.45)

        assert report is not None
        assert report.weather_main == 'Unknown'
        assert report.temperature == 12.4
