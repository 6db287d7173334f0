# portal/routes/admin.py
import logging
from datetime import date

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func

from portal import limiter
from portal.models import Business, Event, TrafficLocation, User
from portal.services.admin_session import (
    AdminNotConfiguredError,
    admin_required,
    check_password,
    clear_session_cookie,
    is_admin_request,
    issue_token,
    set_session_cookie,
)
from portal.services.datastore import datastore
from portal.services.maintenance import MaintenanceConflictError, get_store
from portal.middleware.db_connection import requires_datastore
from portal.utils.http import (
    InvalidRequestBody,
    clean_value,
    copy_fields,
    json_body,
    json_error,
    optional_json_body,
    parse_bool,
    parse_date,
    parse_time,
)

logger = logging.getLogger(__name__)

bp = Blueprint('admin', __name__, url_prefix='/api/admin')


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    data = json_body()
    try:
        valid = check_password(data.get('password'))
    except AdminNotConfiguredError:
        logger.error("Admin login attempted but ADMIN_PASSWORD is not set")
        return json_error('admin_not_configured', 503, success=False)

    if not valid:
        logger.warning(f"Failed admin login from {request.remote_addr}")
        return json_error('wrong_password', 401, success=False)

    logger.info(f"Admin login from {request.remote_addr}")
    return set_session_cookie(jsonify({'success': True}), issue_token())


@bp.route('/logout', methods=['POST'])
def logout():
    return clear_session_cookie(jsonify({'success': True}))


@bp.route('/session', methods=['GET'])
def session_status():
    return jsonify({'authenticated': is_admin_request()})


# ---------------------------------------------------------------------------
# Maintenance mode
# ---------------------------------------------------------------------------

def _expected_revision(data):
    """Revision the caller last saw, from the body or an If-Match header."""
    raw = data.get('revision')
    if raw is None:
        raw = request.headers.get('If-Match')
        if raw is not None:
            raw = raw.strip()
            if raw.startswith('W/'):
                raw = raw[2:]
            raw = raw.strip('"')
    if raw is None or raw == '':
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidRequestBody(f"revision must be an integer, got {raw!r}")


def _conflict(error):
    logger.warning(f"Maintenance write rejected: {error}")
    return json_error('maintenance_conflict', 409, current=error.current.to_dict())


@bp.route('/maintenance', methods=['GET'])
def maintenance_status():
    return jsonify(get_store().read().to_dict())


@bp.route('/maintenance', methods=['POST'])
@admin_required
def enable_maintenance():
    data = optional_json_body()
    expected = _expected_revision(data)
    try:
        status = get_store().enable(
            message=clean_value(data.get('message')),
            estimated_end=clean_value(data.get('estimatedEnd')),
            expected_revision=expected,
        )
    except MaintenanceConflictError as e:
        return _conflict(e)
    except OSError as e:
        logger.error(f"Could not write maintenance flag: {e}", exc_info=True)
        return json_error('maintenance_enable_failed', 500)

    return jsonify({'success': True, **status.to_dict()})


@bp.route('/maintenance', methods=['DELETE'])
@admin_required
def disable_maintenance():
    data = optional_json_body()
    expected = _expected_revision(data)
    try:
        status = get_store().disable(expected_revision=expected)
    except MaintenanceConflictError as e:
        return _conflict(e)
    except OSError as e:
        logger.error(f"Could not remove maintenance flag: {e}", exc_info=True)
        return json_error('maintenance_disable_failed', 500)

    return jsonify({'success': True, 'enabled': False, 'revision': status.revision})


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def _collect_stats(session):
    today = date.today()
    traffic_alerts = 0
    for location in session.query(TrafficLocation).filter_by(is_active=True):
        current = location.current_status()
        if current is not None and current.status != 'open':
            traffic_alerts += 1

    return {
        'businesses_count': session.query(func.count(Business.id)).scalar() or 0,
        'businesses_active': session.query(func.count(Business.id)).filter(Business.is_active.is_(True)).scalar() or 0,
        'events_upcoming': session.query(func.count(Event.id)).filter(
            Event.is_active.is_(True), Event.start_date >= today).scalar() or 0,
        'traffic_alerts': traffic_alerts,
        'users_count': session.query(func.count(User.id)).scalar() or 0,
    }


@bp.route('/stats', methods=['GET'])
@admin_required
def stats():
    result = datastore.read(_collect_stats)
    if not result.available:
        return jsonify({'stats': {
            'businesses_count': 0,
            'businesses_active': 0,
            'events_upcoming': 0,
            'traffic_alerts': 0,
            'users_count': 0,
        }})
    return jsonify({'stats': result.value})


# ---------------------------------------------------------------------------
# Content creation
# ---------------------------------------------------------------------------

EVENT_OPTIONAL_FIELDS = (
    'description', 'description_en', 'location_name', 'location_address',
    'latitude', 'longitude', 'organizer_name', 'contact_email', 'contact_phone',
    'website', 'image_url', 'images', 'recurrence_rule', 'max_participants',
    'registration_url',
)

BUSINESS_OPTIONAL_FIELDS = (
    'category_id', 'description', 'description_en', 'street', 'house_number',
    'phone', 'email', 'website', 'opening_hours', 'opening_hours_text', 'tags',
    'images', 'logo_url', 'latitude', 'longitude',
)


def _flag(data, name, default):
    return parse_bool(data.get(name), default)


@bp.route('/events', methods=['POST'])
@admin_required
@requires_datastore
def create_event():
    data = json_body()
    title = clean_value(data.get('title'))
    if not title:
        return json_error('missing_field', 400, params={'field': 'title'})
    if not clean_value(data.get('start_date')):
        return json_error('missing_field', 400, params={'field': 'start_date'})

    try:
        start_date = parse_date(data.get('start_date'))
        end_date = parse_date(data.get('end_date'))
    except ValueError:
        return json_error('invalid_date', 400, params={'field': 'start_date/end_date'})
    try:
        start_time = parse_time(data.get('start_time'))
        end_time = parse_time(data.get('end_time'))
    except ValueError:
        return json_error('invalid_date', 400, params={'field': 'start_time/end_time'})

    event = Event(
        title=title,
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
        category=clean_value(data.get('category')) or 'general',
        is_all_day=_flag(data, 'is_all_day', False),
        is_active=_flag(data, 'is_active', True),
        is_featured=_flag(data, 'is_featured', False),
        is_recurring=_flag(data, 'is_recurring', False),
        requires_registration=_flag(data, 'requires_registration', False),
        **copy_fields(data, EVENT_OPTIONAL_FIELDS),
    )

    def insert(session):
        session.add(event)
        session.flush()
        return event.to_dict()

    created = datastore.write(insert).value
    logger.info(f"Admin created event {created['id']}: {title}")
    return jsonify({'success': True, 'event': created}), 201


@bp.route('/businesses', methods=['POST'])
@admin_required
@requires_datastore
def create_business():
    data = json_body()
    name = clean_value(data.get('name'))
    if not name:
        return json_error('missing_field', 400, params={'field': 'name'})

    config = current_app.config
    business = Business(
        name=name,
        postal_code=clean_value(data.get('postal_code')) or config['PORTAL_POSTAL_CODE'],
        city=clean_value(data.get('city')) or config['PORTAL_LOCATION_NAME'],
        location=clean_value(data.get('location')) or config['PORTAL_LOCATION_NAME'],
        is_active=_flag(data, 'is_active', True),
        is_verified=_flag(data, 'is_verified', False),
        is_featured=_flag(data, 'is_featured', False),
        is_recommended=_flag(data, 'is_recommended', False),
        sort_order=data.get('sort_order') or 0,
        **copy_fields(data, BUSINESS_OPTIONAL_FIELDS),
    )

    def insert(session):
        session.add(business)
        session.flush()
        return business.to_dict()

    created = datastore.write(insert).value
    logger.info(f"Admin created business {created['id']}: {name}")
    return jsonify({'success': True, 'business': created}), 201
