# portal/routes/mobility.py
"""Public transport, location search and traffic."""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from portal.models import TrafficLocation
from portal.services.datastore import datastore
from portal.services.fallback_data import TRAFFIC_LOCATIONS, fallback_list
from portal.services.traffic_service import TrafficService
from portal.services.transit_service import (
    KW_PRODUCTS,
    KW_STATION_ID,
    KW_STATION_NAME,
    STOPS,
    TransitService,
    resolve_stops,
)
from portal.utils.api_request import APIRequestError
from portal.utils.cache_control import cache_hint
from portal.utils.http import bool_arg, int_arg, json_error

logger = logging.getLogger(__name__)

bp = Blueprint('mobility', __name__, url_prefix='/api')


def _transit():
    config = current_app.config
    return TransitService(
        config['VBB_API_BASE'],
        timeout=config['UPSTREAM_TIMEOUT'],
        location_timeout=config['LOCATION_LOOKUP_TIMEOUT'],
    )


def _float_arg(name):
    try:
        return float(request.args[name])
    except (KeyError, ValueError):
        return None


def _now():
    return datetime.now(timezone.utc).isoformat()


@bp.route('/transit', methods=['GET'])
@cache_hint(30)
def transit():
    stop_id = request.args.get('stop')
    limit = int_arg('limit', 10, minimum=1, maximum=100)
    service = _transit()

    try:
        if stop_id == 'kw':
            requested = request.args.get('products')
            products = [p for p in requested.split(',') if p in KW_PRODUCTS] if requested else list(KW_PRODUCTS)
            departures = service.hub_departures(products)
            return jsonify({
                'departures': departures[:limit],
                'station': KW_STATION_NAME,
                'stationId': KW_STATION_ID,
                'isLive': bool(departures),
                'lastUpdated': _now(),
            })

        lat, lng = _float_arg('lat'), _float_arg('lng')
        stops = resolve_stops(
            stop_id=stop_id,
            address=request.args.get('address'),
            lat=lat if lng is not None else None,
            lng=lng if lat is not None else None,
        )
        board = service.board(stops, limit)
    except Exception as e:
        logger.error(f"Transit board failed: {e}", exc_info=True)
        return json_error('transit_error', 500)

    return jsonify({
        'departures': board['departures'],
        'stops': stops,
        'allStops': STOPS,
        'isLive': board['isLive'],
        'lastUpdated': _now(),
    })


@bp.route('/locations', methods=['GET'])
@cache_hint(3600)
def locations():
    query = (request.args.get('query') or '').strip()
    if len(query) < 2:
        return jsonify({'locations': []})

    try:
        found = _transit().search_locations(query)
    except APIRequestError as e:
        logger.warning(f"Location search upstream error {e.status_code}")
        return json_error('locations_error', e.status_code)
    return jsonify({'locations': found})


@bp.route('/traffic', methods=['GET'])
@cache_hint(0)
def traffic():
    config = current_app.config
    service = TrafficService(config.get('GOOGLE_MAPS_API_KEY'), timeout=config['UPSTREAM_TIMEOUT'])
    try:
        return jsonify(service.snapshot())
    except Exception as e:
        logger.error(f"Traffic snapshot failed: {e}", exc_info=True)
        return json_error('traffic_error', 500)


@bp.route('/traffic/status', methods=['GET'])
def traffic_status():
    dashboard_only = bool_arg('dashboard', default=True)

    def query(session):
        q = session.query(TrafficLocation).filter(TrafficLocation.is_active.is_(True))
        if dashboard_only:
            q = q.filter(TrafficLocation.show_on_dashboard.is_(True))
        locations = []
        for location in q.order_by(TrafficLocation.sort_order.asc()):
            current = location.current_status()
            locations.append({
                'id': location.id,
                'name': location.name,
                'name_short': location.name_short,
                'location_type': location.location_type,
                'status': current.status if current else 'open',
                'status_level': current.status_level if current else 'green',
                'message': current.message if current else None,
                'valid_until': current.valid_until.isoformat() if current and current.valid_until else None,
            })
        return locations

    result = datastore.read(query)
    if not result.available:
        return jsonify({'locations': fallback_list(TRAFFIC_LOCATIONS), 'source': 'fallback'})
    return jsonify({'locations': result.value, 'source': 'database'})
