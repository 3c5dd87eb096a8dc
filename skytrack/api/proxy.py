"""
Upstream proxy endpoint.

- GET /api/upstream/flights - Forward to AirLabs using the server-held key

Lets a browser-side fetcher reach AirLabs without ever seeing the API key.
The response body is passed through unchanged, so a client pointed here
behaves exactly as if it called AirLabs directly.
"""

import logging

import requests
from flask import Blueprint, current_app, jsonify

logger = logging.getLogger(__name__)

proxy_bp = Blueprint('proxy', __name__, url_prefix='/api/upstream')


@proxy_bp.route('/flights', methods=['GET'])
def proxy_flights():
    """Fetch the AirLabs flight list on behalf of the caller."""
    upstream = current_app.config['SKYTRACK'].upstream

    if not upstream.airlabs_api_key:
        logger.error('AIRLABS_API_KEY not found in environment variables')
        return jsonify({'error': 'API key not configured'}), 500

    try:
        response = requests.get(
            f'{upstream.airlabs_base_url.rstrip("/")}/flights',
            params={'api_key': upstream.airlabs_api_key},
            timeout=upstream.request_timeout,
        )
        response.raise_for_status()
        data = response.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        logger.error(f'Error fetching flights: AirLabs API Error: {status}')
        return jsonify({
            'error': 'Failed to fetch flights',
            'message': f'AirLabs API Error: {status}',
        }), 500
    except (requests.RequestException, ValueError) as e:
        logger.error(f'Error fetching flights: {e}')
        return jsonify({
            'error': 'Failed to fetch flights',
            'message': str(e),
        }), 500

    return jsonify(data)
