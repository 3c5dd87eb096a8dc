"""Tests for configuration validation."""

from dataclasses import replace

import pytest

from skytrack.config import config, parse_bounds, validate_config
from skytrack.exceptions import ConfigError


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults_are_valid(self):
        assert validate_config(config) is config

    def test_unknown_source(self):
        bad = replace(config, upstream=replace(config.upstream, source='flightaware'))
        with pytest.raises(ConfigError, match='UPSTREAM_SOURCE'):
            validate_config(bad)

    @pytest.mark.parametrize('interval', [1, 4, 46, 600])
    def test_poll_interval_window(self, interval):
        bad = replace(config, fetch=replace(config.fetch, poll_interval=interval))
        with pytest.raises(ConfigError, match='POLL_INTERVAL_SECONDS'):
            validate_config(bad)

    def test_tick_interval(self):
        interpolation = replace(config.interpolation, tick_hz=50)
        assert interpolation.tick_interval == pytest.approx(0.02)


class TestOpenSkyBounds:
    """Tests for OPENSKY_BBOX parsing."""

    def test_parses_lamin_lomin_lamax_lomax(self):
        assert parse_bounds(' 45.8,5.9 , 47.8,10.5') == (45.8, 5.9, 47.8, 10.5)

    def test_unset_means_no_region(self):
        upstream = replace(config.upstream, opensky_bbox=None)
        assert upstream.opensky_bounds is None

    @pytest.mark.parametrize('text', ['1,2,3', 'a,b,c,d', '50,0,40,10', '0,0,95,10', 'nan,0,1,1'])
    def test_rejects_bad_boxes(self, text):
        """Malformed, inverted or out-of-range boxes fail validation."""
        bad = replace(config, upstream=replace(config.upstream, opensky_bbox=text))
        with pytest.raises(ConfigError, match='OPENSKY_BBOX'):
            validate_config(bad)
