# portal/routes/pages.py
from flask import Blueprint, abort, current_app, render_template

from portal.i18n import translate
from portal.services.maintenance import get_store

bp = Blueprint('pages', __name__)

PUBLIC_PAGES = {
    'events': ('Veranstaltungen', 'Events'),
    'listings': ('Branchenverzeichnis', 'Business directory'),
    'forum': ('Forum', 'Forum'),
    'bulletin': ('Schwarzes Brett', 'Bulletin board'),
    'pets': ('Haustiere', 'Pets'),
    'report': ('Mängelmelder', 'Report a problem'),
    'factcheck': ('Faktencheck', 'Fact check'),
    'waste': ('Müllabfuhr', 'Waste collection'),
    'transport': ('ÖPNV', 'Public transport'),
    'traffic': ('Verkehr', 'Traffic'),
    'weather': ('Wetter', 'Weather'),
    'mobility': ('Mobilität', 'Mobility'),
    'map': ('Karte', 'Map'),
    'history': ('Geschichte', 'History'),
    'imprint': ('Impressum', 'Imprint'),
    'privacy': ('Datenschutz', 'Privacy'),
}


def _check_locale(locale):
    if locale not in current_app.config['SUPPORTED_LOCALES']:
        abort(404)


def _title(page, locale):
    german, english = PUBLIC_PAGES[page]
    return english if locale == 'en' else german


@bp.route('/<locale>/')
def home(locale):
    _check_locale(locale)
    return render_template(
        'home.html',
        locale=locale,
        location_name=current_app.config['PORTAL_LOCATION_NAME'],
        pages={page: _title(page, locale) for page in PUBLIC_PAGES},
    )


@bp.route('/<locale>/maintenance')
def maintenance(locale):
    _check_locale(locale)
    status = get_store().read()
    until = translate('maintenance_until', locale, until=status.estimated_end) if status.estimated_end else None
    return render_template(
        'maintenance.html',
        locale=locale,
        title=translate('maintenance_title', locale),
        message=status.message or translate('maintenance_default_message', locale),
        until=until,
    )


@bp.route('/<locale>/admin')
def admin(locale):
    _check_locale(locale)
    return render_template('admin.html', locale=locale)


@bp.route('/<locale>/<page>')
def page(locale, page):
    _check_locale(locale)
    if page not in PUBLIC_PAGES:
        abort(404)
    return render_template('page.html', locale=locale, page=page, title=_title(page, locale))
