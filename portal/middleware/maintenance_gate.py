# portal/middleware/maintenance_gate.py

import logging

from flask import current_app, redirect, request

from portal.i18n import get_locale
from portal.services.admin_session import is_admin_request
from portal.services.maintenance import get_store

logger = logging.getLogger(__name__)


def is_exempt_path(path, prefixes, locales):
    """True when ``path`` belongs to a surface the gate never blocks.

    An optional leading locale segment is skipped; the next segment must
    equal one of ``prefixes`` exactly (``/apiary`` is not ``/api``).
    """
    segments = [segment for segment in path.split('/') if segment]
    if segments and segments[0] in locales:
        segments = segments[1:]
    if not segments:
        return False
    return segments[0] in prefixes


def maintenance_gate():
    """before_request hook: redirect visitors while maintenance is on."""
    config = current_app.config
    if is_exempt_path(request.path, config['MAINTENANCE_EXEMPT_PREFIXES'], config['SUPPORTED_LOCALES']):
        return None

    status = get_store().read()
    if not status.enabled:
        return None

    if is_admin_request():
        return None

    target = f"/{get_locale()}/maintenance"
    logger.debug(f"Maintenance active, redirecting {request.path} to {target}")
    return redirect(target, code=307)
