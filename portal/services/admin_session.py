# portal/services/admin_session.py
"""Signed admin session tokens.

The admin area has one shared password. A successful login mints an HS256
token (``sub="admin"``) that is stored in an HTTP-only cookie; only a token
that verifies against ``ADMIN_TOKEN_SECRET`` and has not expired counts as
an admin.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from datetime import datetime, timezone
from functools import wraps

import jwt
from flask import current_app, request

from portal.utils.http import json_error

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SUBJECT = "admin"


class AdminNotConfiguredError(Exception):
    """ADMIN_PASSWORD is not set."""


def _secret() -> str:
    return current_app.config.get("ADMIN_TOKEN_SECRET") or current_app.config["SECRET_KEY"]


def _lifetime():
    return current_app.config["ADMIN_SESSION_LIFETIME"]


def check_password(candidate) -> bool:
    expected = current_app.config.get("ADMIN_PASSWORD")
    if not expected:
        raise AdminNotConfiguredError()
    if not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def issue_token() -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": SUBJECT,
        "iat": now,
        "exp": now + _lifetime(),
        "jti": secrets.token_hex(16),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def verify_token(token) -> bool:
    if not token:
        return False
    try:
        claims = jwt.decode(token, _secret(), algorithms=[ALGORITHM], options={"require": ["exp", "sub"]})
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired admin token")
        return False
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected invalid admin token: %s", e)
        return False
    return claims.get("sub") == SUBJECT


def is_admin_request() -> bool:
    return verify_token(request.cookies.get(current_app.config["ADMIN_SESSION_COOKIE"]))


def set_session_cookie(response, token: str):
    response.set_cookie(
        current_app.config["ADMIN_SESSION_COOKIE"],
        token,
        max_age=int(_lifetime().total_seconds()),
        httponly=True,
        secure=current_app.config.get("ADMIN_COOKIE_SECURE", False),
        samesite="Strict",
        path="/",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(
        current_app.config["ADMIN_SESSION_COOKIE"],
        path="/",
        httponly=True,
        secure=current_app.config.get("ADMIN_COOKIE_SECURE", False),
        samesite="Strict",
    )
    return response


def admin_required(f):
    """Decorator for JSON endpoints that need a verified admin cookie"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_admin_request():
            return json_error("unauthorized", 401)
        return f(*args, **kwargs)
    return decorated_function
