"""
Exception hierarchy for SkyTrack.

Upstream failures are recovered by the tracking engine: the previous
snapshot stays on display and the error message is surfaced through
the engine status.
"""

from typing import Optional


class SkyTrackError(Exception):
    """Base exception for all SkyTrack errors."""


class ConfigError(SkyTrackError):
    """Invalid or missing configuration."""


class UpstreamError(SkyTrackError):
    """Telemetry request failed (network, non-2xx status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        source: str = '',
    ):
        self.status_code = status_code
        self.source = source
        super().__init__(message)


class NoDataError(UpstreamError):
    """
    Snapshot contained zero usable records.

    Treated as a failure rather than an empty sky: the aircraft already
    on display stay where they are.
    """


class ReferenceDataError(SkyTrackError):
    """Reference airport dataset could not be loaded."""
