"""
SkyTrack - live aircraft tracking with smooth interpolated motion.

Modules:
- config: Environment-driven settings
- ingestion: Upstream telemetry clients and snapshot normalization
- engine: Entity store, kinematic cache, trails, interpolation, scheduling
- search: Weighted ranking over flights and airports
- services: Weather lookup
- api: Flask blueprints
"""

__version__ = '1.0.0'
