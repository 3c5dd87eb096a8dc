"""Tests for upstream HTTP clients."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
import requests

from skytrack.config import config
from skytrack.exceptions import UpstreamError
from skytrack.ingestion import AirLabsClient, OpenSkyClient
from skytrack.ingestion.http import get_json
from skytrack.ingestion import opensky_client
from skytrack.ingestion.opensky_client import BoundingBox


def mock_session(payload=None, status_code=200, reason='OK', exc=None):
    """requests.Session stand-in returning one canned response."""
    session = MagicMock(spec=requests.Session)
    if exc is not None:
        session.get.side_effect = exc
        return session

    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    session.get.return_value = response
    return session


class TestGetJson:
    """Tests for get_json error mapping."""

    def test_returns_payload(self):
        session = mock_session({'ok': True})
        assert get_json(session, 'http://x', 'test') == {'ok': True}

    def test_http_error(self):
        session = mock_session(status_code=503, reason='Service Unavailable')
        with pytest.raises(UpstreamError) as excinfo:
            get_json(session, 'http://x', 'AirLabs')
        assert str(excinfo.value) == 'AirLabs API Error: 503 Service Unavailable'
        assert excinfo.value.status_code == 503

    def test_rate_limited(self):
        session = mock_session(status_code=429, reason='Too Many Requests')
        with pytest.raises(UpstreamError) as excinfo:
            get_json(session, 'http://x', 'opensky')
        assert excinfo.value.status_code == 429

    def test_timeout(self):
        session = mock_session(exc=requests.exceptions.Timeout())
        with pytest.raises(UpstreamError, match='timed out'):
            get_json(session, 'http://x', 'test')

    def test_connection_error(self):
        session = mock_session(exc=requests.exceptions.ConnectionError('refused'))
        with pytest.raises(UpstreamError, match='request failed'):
            get_json(session, 'http://x', 'test')

    def test_invalid_json(self):
        session = mock_session()
        session.get.return_value.json.side_effect = ValueError('bad json')
        with pytest.raises(UpstreamError, match='invalid JSON'):
            get_json(session, 'http://x', 'test')


class TestAirLabsClient:
    """Tests for AirLabsClient."""

    def test_returns_response_list(self):
        session = mock_session({'response': [{'hex': 'a1'}]})
        client = AirLabsClient(api_key='secret', base_url='https://airlabs.co/api/v9/', session=session)

        assert client.get_raw_records() == [{'hex': 'a1'}]
        args, kwargs = session.get.call_args
        assert args[0] == 'https://airlabs.co/api/v9/flights'
        assert kwargs['params'] == {'api_key': 'secret'}

    def test_proxy_mode_sends_no_key(self):
        session = mock_session({'response': []})
        client = AirLabsClient(base_url='http://localhost:5000/api/upstream', session=session)

        assert client.get_raw_records() == []
        assert session.get.call_args.kwargs['params'] is None

    def test_application_error(self):
        session = mock_session({'error': {'message': 'Invalid API Key', 'code': 'wrong_key'}})
        client = AirLabsClient(api_key='bad', session=session)
        with pytest.raises(UpstreamError, match='Invalid API Key'):
            client.get_raw_records()

    def test_unexpected_payload(self):
        client = AirLabsClient(api_key='k', session=mock_session(['not', 'an', 'object']))
        with pytest.raises(UpstreamError):
            client.get_raw_records()


class TestOpenSkyClient:
    """Tests for OpenSkyClient."""

    def test_returns_states(self):
        session = mock_session({'time': 1, 'states': [['abc123']]})
        client = OpenSkyClient(session=session)
        client._min_interval = 0

        assert client.get_raw_records() == [['abc123']]

    def test_null_states(self):
        """OpenSky reports an empty sky as states: null."""
        client = OpenSkyClient(session=mock_session({'time': 1, 'states': None}))
        client._min_interval = 0
        assert client.get_raw_records() == []

    def test_bbox_params(self):
        session = mock_session({'states': []})
        client = OpenSkyClient(bbox=BoundingBox(50.0, -1.0, 52.0, 1.0), session=session)
        client._min_interval = 0

        client.get_raw_records()
        assert session.get.call_args.kwargs['params'] == {
            'lamin': 50.0, 'lomin': -1.0, 'lamax': 52.0, 'lomax': 1.0,
        }

    def test_no_bbox_queries_globe(self):
        session = mock_session({'states': []})
        client = OpenSkyClient(session=session)
        client._min_interval = 0

        client.get_raw_records()
        assert session.get.call_args.kwargs['params'] == {}

    def test_from_config_uses_opensky_bbox(self, monkeypatch):
        """OPENSKY_BBOX restricts the query region of the configured client."""
        upstream = replace(config.upstream, opensky_bbox='45.8, 5.9, 47.8, 10.5')
        monkeypatch.setattr(opensky_client, 'config', replace(config, upstream=upstream))

        client = OpenSkyClient.from_config()
        assert client.bbox == BoundingBox(45.8, 5.9, 47.8, 10.5)
