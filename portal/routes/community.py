# portal/routes/community.py
"""Forum, bulletin board, pet alerts, cleanliness reports and fact checks.

Lists are capped at LIST_CAP rows. Creates copy a fixed set of fields from
the body; anything else the client sends is ignored.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from portal.middleware.db_connection import requires_datastore
from portal.models import (
    BulletinCategory,
    BulletinPost,
    CleanlinessReport,
    CleanlinessReportType,
    Factcheck,
    ForumCategory,
    ForumPost,
    PetAlert,
)
from portal.services.datastore import datastore
from portal.services.fallback_data import (
    BULLETIN_CATEGORIES,
    FORUM_CATEGORIES,
    REPORT_TYPES,
    fallback_list,
)
from portal.utils.http import clean_value, copy_fields, first_missing, json_body, json_error

logger = logging.getLogger(__name__)

bp = Blueprint('community', __name__, url_prefix='/api')

LIST_CAP = 50


def _list_or_empty(query):
    result = datastore.read(query)
    return jsonify(result.value if result.available else [])


def _categories(model, fallback):
    result = datastore.read(lambda session: [
        c.to_dict() for c in session.query(model)
        .filter(model.is_active.is_(True))
        .order_by(model.sort_order.asc())
    ])
    return jsonify(result.value if result.available else fallback_list(fallback))


def _category_id(session, model, name):
    category = session.query(model).filter_by(name=name).first()
    return category.id if category else None


def _create(model, required, optional, **server_side):
    """Validate ``required``, whitelist-copy ``optional`` and insert one row."""
    data = json_body()
    missing = first_missing(data, required)
    if missing:
        return json_error('missing_field', 400, params={'field': missing})

    values = copy_fields(data, required + optional)
    values.update(server_side)
    row = model(**values)

    def insert(session):
        session.add(row)
        session.flush()
        return row.to_dict()

    created = datastore.write(insert).value
    logger.info(f"Created {model.__tablename__} row {created['id']}")
    return jsonify(created), 201


# ---------------------------------------------------------------------------
# Forum
# ---------------------------------------------------------------------------

@bp.route('/forum', methods=['GET'])
def list_forum_posts():
    category = request.args.get('category')

    def query(session):
        q = session.query(ForumPost).filter(
            ForumPost.is_active.is_(True),
            ForumPost.is_approved.is_(True),
            ForumPost.parent_id.is_(None),
        )
        if category:
            category_id = _category_id(session, ForumCategory, category)
            if category_id is not None:
                q = q.filter(ForumPost.category_id == category_id)
        q = q.order_by(ForumPost.is_pinned.desc(), ForumPost.created_at.desc(), ForumPost.id.desc())
        return [p.to_dict() for p in q.limit(LIST_CAP)]

    return _list_or_empty(query)


@bp.route('/forum', methods=['POST'])
@requires_datastore
def create_forum_post():
    return _create(ForumPost, ('title', 'content', 'author_name'), ('category_id', 'parent_id'))


@bp.route('/forum/categories', methods=['GET'])
def list_forum_categories():
    return _categories(ForumCategory, FORUM_CATEGORIES)


# ---------------------------------------------------------------------------
# Bulletin board
# ---------------------------------------------------------------------------

@bp.route('/bulletin', methods=['GET'])
def list_bulletin_posts():
    category = request.args.get('category')

    def query(session):
        q = session.query(BulletinPost).filter(BulletinPost.is_active.is_(True))
        if category:
            category_id = _category_id(session, BulletinCategory, category)
            if category_id is not None:
                q = q.filter(BulletinPost.category_id == category_id)
        q = q.order_by(BulletinPost.created_at.desc(), BulletinPost.id.desc())
        return [p.to_dict() for p in q.limit(LIST_CAP)]

    return _list_or_empty(query)


@bp.route('/bulletin', methods=['POST'])
@requires_datastore
def create_bulletin_post():
    data = json_body()
    return _create(
        BulletinPost,
        ('title', 'content', 'author_name'),
        ('category_id', 'author_email', 'author_phone', 'lending_duration'),
        is_lending=bool(data.get('is_lending')),
        location=clean_value(data.get('location')) or current_app.config['PORTAL_LOCATION_NAME'],
        show_contact=data.get('show_contact') is not False,
    )


@bp.route('/bulletin/categories', methods=['GET'])
def list_bulletin_categories():
    return _categories(BulletinCategory, BULLETIN_CATEGORIES)


# ---------------------------------------------------------------------------
# Pets
# ---------------------------------------------------------------------------

@bp.route('/pets', methods=['GET'])
def list_pet_alerts():
    alert_type = request.args.get('type')
    pet_type = request.args.get('pet')

    def query(session):
        q = session.query(PetAlert).filter(PetAlert.status != 'expired')
        if alert_type:
            q = q.filter(PetAlert.alert_type == alert_type)
        if pet_type:
            q = q.filter(PetAlert.pet_type == pet_type)
        q = q.order_by(PetAlert.is_urgent.desc(), PetAlert.created_at.desc(), PetAlert.id.desc())
        return [a.to_dict() for a in q.limit(LIST_CAP)]

    return _list_or_empty(query)


@bp.route('/pets', methods=['POST'])
@requires_datastore
def create_pet_alert():
    data = json_body()
    return _create(
        PetAlert,
        ('alert_type', 'pet_type', 'description', 'contact_name'),
        ('pet_name', 'pet_breed', 'pet_color', 'pet_size', 'pet_distinctive_features',
         'last_seen_location', 'last_seen_date', 'contact_phone', 'contact_email'),
        is_urgent=bool(data.get('is_urgent')),
        status='active',
    )


# ---------------------------------------------------------------------------
# Cleanliness reports
# ---------------------------------------------------------------------------

@bp.route('/report', methods=['GET'])
def list_reports():
    report_type = request.args.get('type')
    status = request.args.get('status')

    def query(session):
        q = session.query(CleanlinessReport)
        if report_type:
            q = q.filter(CleanlinessReport.report_type == report_type)
        if status:
            q = q.filter(CleanlinessReport.status == status)
        q = q.order_by(CleanlinessReport.created_at.desc(), CleanlinessReport.id.desc())
        return [r.to_dict() for r in q.limit(LIST_CAP)]

    return _list_or_empty(query)


@bp.route('/report', methods=['POST'])
@requires_datastore
def create_report():
    data = json_body()
    anonymous = bool(data.get('anonymous'))
    reporter = {} if not anonymous else {
        'reporter_name': None,
        'reporter_email': None,
        'reporter_phone': None,
    }
    return _create(
        CleanlinessReport,
        ('report_type', 'title', 'description', 'location_description'),
        ('street', 'reporter_name', 'reporter_email', 'reporter_phone'),
        anonymous=anonymous,
        status='new',
        priority='normal',
        **reporter,
    )


@bp.route('/report/types', methods=['GET'])
def list_report_types():
    return _categories(CleanlinessReportType, REPORT_TYPES)


# ---------------------------------------------------------------------------
# Fact checks
# ---------------------------------------------------------------------------

@bp.route('/factcheck', methods=['GET'])
def list_factchecks():
    verdict = request.args.get('verdict')
    category = request.args.get('category')

    def query(session):
        q = session.query(Factcheck).filter(Factcheck.is_published.is_(True))
        if verdict:
            q = q.filter(Factcheck.verdict == verdict)
        if category:
            q = q.filter(Factcheck.category == category)
        q = q.order_by(Factcheck.published_at.desc(), Factcheck.id.desc())
        return [f.to_dict() for f in q.limit(LIST_CAP)]

    return _list_or_empty(query)
