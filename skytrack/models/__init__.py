"""
Data models for SkyTrack.

In-memory only - nothing here outlives the process:
1. Entity: live aircraft, replaced wholesale on each snapshot
2. ReferenceAirport: static airport records for search
"""

from skytrack.models.entity import (
    Entity,
    Kinematics,
    Position,
    Route,
    NOT_AVAILABLE,
    UNKNOWN_AIRCRAFT,
    UNKNOWN_AIRLINE,
    UNKNOWN_COUNTRY,
)
from skytrack.models.airport import ReferenceAirport

__all__ = [
    'Entity',
    'Kinematics',
    'Position',
    'Route',
    'ReferenceAirport',
    'NOT_AVAILABLE',
    'UNKNOWN_AIRCRAFT',
    'UNKNOWN_AIRLINE',
    'UNKNOWN_COUNTRY',
]
