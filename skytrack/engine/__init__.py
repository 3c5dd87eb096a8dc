"""
Live tracking engine for SkyTrack.

Snapshot merge, kinematic cache, trail buffers, dead-reckoning
interpolation, and the scheduling that drives them.
"""

from skytrack.engine.interpolator import Interpolator, dead_reckon
from skytrack.engine.kinematics import KinematicAnchor, KinematicCache
from skytrack.engine.runner import EngineRunner
from skytrack.engine.scheduler import PeriodicTask
from skytrack.engine.store import EntityStore
from skytrack.engine.trail import TrailBuffer
from skytrack.engine.tracker import EngineStatus, TrackingEngine

__all__ = [
    'EngineRunner',
    'EngineStatus',
    'EntityStore',
    'Interpolator',
    'KinematicAnchor',
    'KinematicCache',
    'PeriodicTask',
    'TrackingEngine',
    'TrailBuffer',
    'dead_reckon',
]
