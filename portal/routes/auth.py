# portal/routes/auth.py
import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_user, logout_user

from portal import limiter
from portal.i18n import translate
from portal.middleware.db_connection import requires_datastore
from portal.models import User
from portal.services.datastore import datastore
from portal.utils.http import clean_value, json_body, json_error

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

MIN_PASSWORD_LENGTH = 8


def _credentials(data):
    email = clean_value(data.get('email'))
    password = data.get('password')
    if not email or not isinstance(password, str) or not password:
        return None, None
    return email.lower(), password


@bp.route('/register', methods=['POST'])
@limiter.limit("3 per minute", key_func=lambda: request.remote_addr)
@limiter.limit("10 per hour", key_func=lambda: request.remote_addr)
def register():
    data = json_body()
    email, password = _credentials(data)
    if not email:
        return json_error('credentials_required', 400)
    if len(password) < MIN_PASSWORD_LENGTH:
        return json_error('password_too_short', 400)
    if not datastore.is_configured():
        return json_error('database_not_configured', 503)

    username = clean_value(data.get('username'))

    def insert(session):
        if session.query(User).filter_by(email=email).first() is not None:
            return 'email_taken'
        if username and session.query(User).filter_by(username=username).first() is not None:
            return 'username_taken'
        user = User(email=email, username=username)
        user.set_password(password)
        session.add(user)
        session.flush()
        return user

    user = datastore.write(insert).value
    if isinstance(user, str):
        return json_error(user, 400)

    logger.info(f"Registered resident account {user.id}")
    login_user(user)
    return jsonify({'user': user.to_dict(), 'message': translate('registered')})


@bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute", key_func=lambda: request.remote_addr)
def login():
    data = json_body()
    email, password = _credentials(data)
    if not email:
        return json_error('credentials_required', 400)
    if not datastore.is_configured():
        return json_error('database_not_configured', 503)

    user = datastore.read(lambda session: session.query(User).filter_by(email=email).first()).value
    if user is None or not user.is_active or not user.check_password(password):
        logger.warning(f"Failed resident login from {request.remote_addr}")
        return json_error('invalid_credentials', 401)

    def touch(session):
        user.last_login = datetime.now(timezone.utc)

    datastore.write(touch)
    login_user(user, remember=bool(data.get('remember')))
    return jsonify({'user': user.to_dict(), 'message': translate('logged_in')})


@bp.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return jsonify({'message': translate('logged_out')})


@bp.route('/me', methods=['GET'])
def me():
    if not current_user.is_authenticated:
        return jsonify({'user': None})
    return jsonify({'user': current_user.to_dict()})


@bp.route('/update-password', methods=['POST'])
@requires_datastore
def update_password():
    if not current_user.is_authenticated:
        return json_error('not_logged_in', 401)

    data = json_body()
    password = data.get('password')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return json_error('password_too_short', 400)

    user = current_user._get_current_object()

    def change(session):
        user.set_password(password)

    datastore.write(change)
    logger.info(f"Resident {user.id} changed their password")
    return jsonify({'message': translate('password_changed')})
