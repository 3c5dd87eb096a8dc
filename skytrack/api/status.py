"""
Status API endpoint.

- GET /api/status - Engine health, connectivity and configuration
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from skytrack.api.common import call_engine, elapsed_ms

logger = logging.getLogger(__name__)

status_bp = Blueprint('status', __name__, url_prefix='/api/status')


@status_bp.route('', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Engine status (loading, last update, degraded-connectivity message)
    - Store, cache, trail and interpolation statistics
    - Weather service statistics
    - Configuration info
    """
    start_time = time.perf_counter()
    cfg = current_app.config['SKYTRACK']

    stats = call_engine(lambda engine: engine.stats)
    weather = current_app.config.get('WEATHER_SERVICE')

    engine_status = stats['status']
    healthy = engine_status['running'] and not engine_status['degraded']

    return jsonify({
        'status': 'healthy' if healthy else 'degraded',
        'engine': stats,
        'weather': weather.stats if weather else None,
        'config': {
            'source': cfg.upstream.source,
            'poll_interval': cfg.fetch.poll_interval,
            'max_entities': cfg.fetch.max_entities,
            'tick_hz': cfg.interpolation.tick_hz,
            'staleness_ceiling': cfg.interpolation.staleness_ceiling,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': elapsed_ms(start_time),
    })
