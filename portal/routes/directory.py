# portal/routes/directory.py
"""Business directory and the public events calendar."""

from datetime import date

from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from portal.models import Business, BusinessCategory, Event
from portal.services.datastore import datastore
from portal.services.fallback_data import BUSINESS_CATEGORIES, fallback_list
from portal.utils.http import bool_arg, int_arg

bp = Blueprint('directory', __name__, url_prefix='/api')


@bp.route('/businesses', methods=['GET'])
def list_businesses():
    category = request.args.get('category')
    location = request.args.get('location')
    search = request.args.get('search')
    limit = int_arg('limit', 100, minimum=1, maximum=100)
    offset = int_arg('offset', 0)

    def query(session):
        q = session.query(Business).filter(Business.is_active.is_(True))
        if category:
            if category.isdigit():
                q = q.filter(Business.category_id == int(category))
            else:
                q = q.join(BusinessCategory, Business.category_id == BusinessCategory.id) \
                     .filter(BusinessCategory.name == category)
        if location:
            q = q.filter(Business.location == location)
        if search:
            pattern = f'%{search}%'
            q = q.filter(or_(Business.name.ilike(pattern), Business.description.ilike(pattern)))

        total = q.count()
        rows = (q.order_by(Business.is_featured.desc(), Business.sort_order.asc(), Business.name.asc())
                 .offset(offset).limit(limit).all())
        return {'businesses': [b.to_dict() for b in rows], 'total': total, 'source': 'database'}

    result = datastore.read(query)
    if not result.available:
        return jsonify({'businesses': [], 'total': 0, 'source': 'none'})
    return jsonify(result.value)


@bp.route('/businesses/categories', methods=['GET'])
def list_business_categories():
    result = datastore.read(lambda session: [
        c.to_dict() for c in session.query(BusinessCategory)
        .filter(BusinessCategory.is_active.is_(True))
        .order_by(BusinessCategory.sort_order.asc())
    ])
    if not result.available:
        return jsonify({'categories': fallback_list(BUSINESS_CATEGORIES)})
    return jsonify({'categories': result.value})


@bp.route('/events/public', methods=['GET'])
def list_public_events():
    category = request.args.get('category')
    include_past = bool_arg('includePast')
    limit = int_arg('limit', 10, minimum=1, maximum=100)
    offset = int_arg('offset', 0)

    def query(session):
        q = session.query(Event).filter(Event.is_active.is_(True))
        if not include_past:
            q = q.filter(Event.start_date >= date.today())
        if category:
            q = q.filter(Event.category == category)

        total = q.count()
        rows = (q.order_by(Event.is_featured.desc(), Event.start_date.asc(), Event.start_time.asc())
                 .offset(offset).limit(limit).all())
        return {'events': [e.to_dict() for e in rows], 'total': total}

    result = datastore.read(query)
    if not result.available:
        return jsonify({'events': [], 'total': 0})
    return jsonify(result.value)
