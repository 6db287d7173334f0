# portal/routes/__init__.py

from flask import Blueprint, redirect

from portal.i18n import get_locale

bp = Blueprint('main', __name__)


@bp.route('/')
def index():
    """Send visitors at the bare root to the home page in their language."""
    return redirect(f'/{get_locale()}/')
