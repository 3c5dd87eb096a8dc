"""
Flight data API endpoints.

Provides endpoints for:
- GET /api/flights - List all tracked flights at their interpolated positions
- GET /api/flights/<id> - Get single flight details with its trail and route airports
- GET /api/flights/<id>/trail - Get the recent track of a flight
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from skytrack.api.common import call_engine, elapsed_ms
from skytrack.models import Route

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


def _trail_to_list(trail) -> list:
    return [[p.longitude, p.latitude] for p in trail]


def _find(engine, entity_id: str):
    # Transponder ids are stored lowercase, synthesized ids uppercase
    return engine.get_entity(entity_id) or engine.get_entity(entity_id.lower())


@flights_bp.route('', methods=['GET'])
def list_flights():
    """
    List all currently tracked flights.

    Query parameters:
    - airborne_only: boolean, filter to airborne flights (default false)
    - limit: int, max results to return (default all, max 1000)
    - include_trails: boolean, attach each flight's trail (default false)

    Positions are the dead-reckoned display positions at request time.
    The status block tells the renderer whether data is degraded.
    """
    start_time = time.perf_counter()

    airborne_only = request.args.get('airborne_only', 'false').lower() == 'true'
    include_trails = request.args.get('include_trails', 'false').lower() == 'true'
    try:
        limit = max(0, min(int(request.args.get('limit', 1000)), 1000))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400

    def collect(engine):
        entities = engine.store.get_airborne() if airborne_only else engine.get_entities()
        flights = []
        for entity in entities[:limit]:
            flight = entity.to_dict()
            if include_trails:
                flight['trail'] = _trail_to_list(engine.get_trail(entity.id))
            flights.append(flight)
        return flights, engine.status.to_dict()

    flights, status = call_engine(collect)

    return jsonify({
        'flights': flights,
        'count': len(flights),
        'status': status,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': elapsed_ms(start_time),
    })


@flights_bp.route('/<entity_id>', methods=['GET'])
def get_flight(entity_id: str):
    """
    Get detailed information for a single flight.

    Adds the trail and resolves the route codes to reference airports
    (null when unknown).
    """
    start_time = time.perf_counter()

    def collect(engine):
        entity = _find(engine, entity_id)
        if entity is None:
            return None
        result = entity.to_dict()
        result['trail'] = _trail_to_list(engine.get_trail(entity.id))
        route = entity.route or Route()
        for key, code in (('origin_airport', route.origin_code),
                          ('destination_airport', route.destination_code)):
            airport = engine.find_airport(code)
            result[key] = airport.to_dict() if airport else None
        return result

    result = call_engine(collect)
    if result is None:
        return jsonify({'error': 'Flight not found'}), 404

    result['query_time_ms'] = elapsed_ms(start_time)
    return jsonify(result)


@flights_bp.route('/<entity_id>/trail', methods=['GET'])
def get_flight_trail(entity_id: str):
    """
    Get the recent track of a flight.

    Trails outlive a flight's absence from a few snapshots, so this may
    answer for an id that /api/flights no longer lists.
    """
    def collect(engine):
        trail = engine.get_trail(entity_id) or engine.get_trail(entity_id.lower())
        return _trail_to_list(trail)

    trail = call_engine(collect)
    if not trail:
        return jsonify({'error': 'No trail for flight'}), 404

    return jsonify({
        'id': entity_id,
        'trail': trail,
        'count': len(trail),
    })
