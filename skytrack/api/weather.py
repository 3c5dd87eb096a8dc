"""
Weather API endpoints.

- GET /api/weather?lat=<lat>&lon=<lon> - Current conditions at a point
- GET /api/weather/flight/<id> - Current conditions at a flight's position
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from skytrack.api.common import call_engine

logger = logging.getLogger(__name__)

weather_bp = Blueprint('weather', __name__, url_prefix='/api/weather')


def _report_response(lat: float, lon: float):
    service = current_app.config['WEATHER_SERVICE']
    report = service.get_weather(lat, lon)
    if report is None:
        return jsonify({'error': 'Weather data unavailable'}), 503
    return jsonify({
        'latitude': lat,
        'longitude': lon,
        'weather': report.to_dict(),
    })


@weather_bp.route('', methods=['GET'])
def weather_at_point():
    """Current weather at an arbitrary coordinate."""
    try:
        lat = float(request.args['lat'])
        lon = float(request.args['lon'])
    except (KeyError, ValueError):
        return jsonify({'error': 'lat and lon query parameters are required'}), 400

    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return jsonify({'error': 'Coordinates out of range'}), 400

    return _report_response(lat, lon)


@weather_bp.route('/flight/<entity_id>', methods=['GET'])
def weather_at_flight(entity_id: str):
    """Current weather at a flight's interpolated position."""
    def locate(engine):
        entity = engine.get_entity(entity_id) or engine.get_entity(entity_id.lower())
        return entity.display_position if entity else None

    position = call_engine(locate)
    if position is None:
        return jsonify({'error': 'Flight not found'}), 404

    return _report_response(position.latitude, position.longitude)
