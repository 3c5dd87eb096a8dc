"""
SkyTrack Flask Application.

Main entry point for the web application. Initializes:
- Tracking engine on its background event loop
- Reference airport load
- Weather service
- API routes

Usage:
    python -m skytrack.app

Or with gunicorn (single worker, the engine lives in-process):
    gunicorn -w 1 'skytrack.app:create_app()'
"""

import logging
import os
from typing import Optional

from flask import Flask
from flask_cors import CORS

from skytrack.api import flights_bp, proxy_bp, search_bp, status_bp, weather_bp
from skytrack.config import AppConfig, config
from skytrack.engine import EngineRunner, TrackingEngine
from skytrack.ingestion import SnapshotFetcher, create_client, load_airports
from skytrack.services import WeatherService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def build_runner(app_config: AppConfig = config) -> EngineRunner:
    """Wire the configured upstream client into a fresh engine."""
    client = create_client(app_config.upstream.source)
    fetcher = SnapshotFetcher(client, max_entities=app_config.fetch.max_entities)
    engine = TrackingEngine(
        fetcher,
        poll_interval=app_config.fetch.poll_interval,
        tick_interval=app_config.interpolation.tick_interval,
        staleness_ceiling=app_config.interpolation.staleness_ceiling,
        evict_after_cycles=app_config.fetch.evict_after_cycles,
    )
    return EngineRunner(engine)


def create_app(
    start_engine: bool = True,
    runner: Optional[EngineRunner] = None,
    weather_service: Optional[WeatherService] = None,
    app_config: AppConfig = config,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_engine: Whether to build and start the background engine.
                      Set to False for testing.
        runner: Pre-built engine runner (used as-is, not started).
        weather_service: Weather lookup service; one is created if omitted.
        app_config: Configuration to expose to the blueprints.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = app_config.secret_key
    app.config['SKYTRACK'] = app_config

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(weather_bp)
    app.register_blueprint(status_bp)
    app.register_blueprint(proxy_bp)

    app.config['WEATHER_SERVICE'] = weather_service or WeatherService(
        base_url=app_config.weather.base_url,
        cache_ttl=app_config.weather.cache_ttl_seconds,
    )

    if runner is None and start_engine:
        runner = build_runner(app_config)
        runner.start(airport_loader=load_airports)
        logger.info(
            f'Tracking started from {app_config.upstream.source} '
            f'every {app_config.fetch.poll_interval}s'
        )
    elif runner is None:
        logger.warning('Tracking engine not started; flight endpoints will return 503')

    app.config['ENGINE_RUNNER'] = runner

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'error': 'Method not allowed'}, 405

    @app.errorhandler(503)
    def unavailable(e):
        return {'error': e.description}, 503

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting SkyTrack on http://localhost:{port}')
    logger.info(f'Flights: http://localhost:{port}/api/flights')
    logger.info(f'Status: http://localhost:{port}/api/status')

    try:
        app.run(
            host='0.0.0.0',
            port=port,
            debug=config.debug,
            use_reloader=False,  # Reloader would start a second engine thread
        )
    finally:
        runner = app.config.get('ENGINE_RUNNER')
        if runner is not None:
            runner.stop()


if __name__ == '__main__':
    run_development_server()
