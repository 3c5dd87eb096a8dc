"""
Search API endpoint.

- GET /api/search?q=<query> - Ranked flight and airport matches
"""

import logging
import time

from flask import Blueprint, jsonify, request

from skytrack.api.common import call_engine, elapsed_ms

logger = logging.getLogger(__name__)

search_bp = Blueprint('search', __name__, url_prefix='/api/search')


@search_bp.route('', methods=['GET'])
def search():
    """
    Search live flights and reference airports.

    Query parameters:
    - q: free-text query (callsign, hex id, airline, airport code/name/city)

    Queries below the minimum length return empty lists, not an error.
    """
    start_time = time.perf_counter()
    query = request.args.get('q', '')

    results = call_engine(lambda engine: engine.search(query).to_dict())

    return jsonify({
        'query': query,
        **results,
        'query_time_ms': elapsed_ms(start_time),
    })
