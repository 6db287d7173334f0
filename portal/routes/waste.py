# portal/routes/waste.py
"""SBAZV waste collection calendar."""

import logging

from flask import Blueprint, current_app, jsonify, request

from portal.i18n import translate
from portal.services.waste_service import (
    STREETS,
    WasteFetchError,
    WasteService,
    is_valid_sbazv_url,
    next_collection,
    upcoming,
)
from portal.utils.cache_control import cache_hint
from portal.utils.http import bool_arg, int_arg

logger = logging.getLogger(__name__)

bp = Blueprint('waste', __name__, url_prefix='/api/waste')


@bp.route('', methods=['GET'])
@cache_hint(3600)
def collections():
    ics_url = (request.args.get('icsUrl') or '').strip()
    if not ics_url:
        return jsonify({'success': False, 'error': translate('waste_needs_setup'), 'needsSetup': True})
    if not is_valid_sbazv_url(ics_url):
        return jsonify({'success': False, 'error': translate('waste_invalid_url')}), 400

    waste_type = (request.args.get('type') or '').strip() or None
    days = int_arg('days', 30, minimum=1, maximum=366)

    config = current_app.config
    service = WasteService(timeout=config['WASTE_FETCH_TIMEOUT'], proxy_timeout=config['WASTE_PROXY_TIMEOUT'])
    try:
        schedule = service.schedule(ics_url)
    except WasteFetchError as e:
        logger.error(f"Waste calendar unavailable: {e}")
        return jsonify({'success': False, 'error': translate('waste_unavailable'), 'source': 'fallback'}), 500

    items = schedule.collections
    if waste_type:
        items = [c for c in items if c['type'] == waste_type]
    items = sorted(items, key=lambda c: c['date'])

    if bool_arg('next'):
        return jsonify({
            'success': True,
            'data': next_collection(items),
            'source': schedule.source,
            'address': schedule.address,
        })

    items = upcoming(items, days)
    return jsonify({
        'success': True,
        'data': items,
        'total': len(items),
        'source': schedule.source,
        'address': schedule.address,
        'filters': {'type': waste_type, 'days': days},
    })


@bp.route('/streets', methods=['GET'])
@cache_hint(86400)
def streets():
    return jsonify({'success': True, 'streets': STREETS, 'total': len(STREETS)})
