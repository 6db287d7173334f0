# portal/i18n.py
"""Locale resolution and the portal's message catalog.

German is the primary language of the portal; English is offered as a
secondary locale. Every JSON error body and every page string that depends on
the visitor's language is looked up here.
"""

from __future__ import annotations

import logging

from flask import current_app, has_app_context, has_request_context, request

logger = logging.getLogger(__name__)

MESSAGES = {
    "de": {
        "unauthorized": "Nicht autorisiert",
        "wrong_password": "Falsches Passwort",
        "login_failed": "Fehler bei der Anmeldung",
        "admin_not_configured": "Der Adminbereich ist nicht konfiguriert",
        "request_failed": "Die Anfrage konnte nicht verarbeitet werden",
        "internal_error": "Interner Serverfehler",
        "database_not_configured": "Datenbank nicht konfiguriert",
        "missing_field": "Pflichtfeld fehlt: {field}",
        "invalid_date": "Ungültiges Datum: {field}",
        "credentials_required": "E-Mail und Passwort erforderlich",
        "password_too_short": "Passwort muss mindestens 8 Zeichen haben",
        "email_taken": "Diese E-Mail-Adresse ist bereits registriert",
        "username_taken": "Dieser Benutzername ist bereits vergeben",
        "invalid_credentials": "Ungültige E-Mail oder Passwort",
        "not_logged_in": "Nicht angemeldet",
        "registered": "Registrierung erfolgreich! Bitte bestätigen Sie Ihre E-Mail-Adresse.",
        "logged_in": "Erfolgreich angemeldet",
        "logged_out": "Erfolgreich abgemeldet",
        "password_changed": "Passwort erfolgreich geändert",
        "maintenance_default_message": "Die Website wird gerade gewartet. Bitte versuchen Sie es später erneut.",
        "maintenance_enable_failed": "Fehler beim Aktivieren des Wartungsmodus",
        "maintenance_disable_failed": "Fehler beim Deaktivieren des Wartungsmodus",
        "maintenance_conflict": "Der Wartungsmodus wurde zwischenzeitlich geändert. Bitte neu laden.",
        "maintenance_title": "Wartungsarbeiten",
        "maintenance_until": "Voraussichtlich beendet: {until}",
        "weather_unavailable": "Wetterdienst nicht erreichbar, es werden Ersatzdaten angezeigt.",
        "transit_error": "Fehler beim Abrufen der ÖPNV-Daten",
        "traffic_error": "Fehler beim Abrufen der Verkehrsdaten",
        "locations_error": "Fehler bei der Ortssuche",
        "waste_needs_setup": "Bitte richte zuerst deine Adresse ein, um die Abholtermine zu sehen.",
        "waste_invalid_url": "Ungültige SBAZV-URL. Die URL muss vom SBAZV-Kalenderexport stammen.",
        "waste_unavailable": "SBAZV-Server vorübergehend nicht erreichbar. Bitte versuche es später erneut.",
        "not_found": "Nicht gefunden",
        "rate_limited": "Zu viele Anfragen. Bitte später erneut versuchen.",
    },
    "en": {
        "unauthorized": "Not authorized",
        "wrong_password": "Wrong password",
        "login_failed": "Login failed",
        "admin_not_configured": "The admin area is not configured",
        "request_failed": "The request could not be processed",
        "internal_error": "Internal server error",
        "database_not_configured": "Database not configured",
        "missing_field": "Required field missing: {field}",
        "invalid_date": "Invalid date: {field}",
        "credentials_required": "E-mail and password required",
        "password_too_short": "Password must be at least 8 characters long",
        "email_taken": "This e-mail address is already registered",
        "username_taken": "This username is already taken",
        "invalid_credentials": "Invalid e-mail or password",
        "not_logged_in": "Not logged in",
        "registered": "Registration successful! Please confirm your e-mail address.",
        "logged_in": "Logged in successfully",
        "logged_out": "Logged out successfully",
        "password_changed": "Password changed successfully",
        "maintenance_default_message": "The website is currently under maintenance. Please try again later.",
        "maintenance_enable_failed": "Could not enable maintenance mode",
        "maintenance_disable_failed": "Could not disable maintenance mode",
        "maintenance_conflict": "Maintenance mode was changed in the meantime. Please reload.",
        "maintenance_title": "Maintenance",
        "maintenance_until": "Expected to end: {until}",
        "weather_unavailable": "Weather service unavailable, showing fallback data.",
        "transit_error": "Could not load public transport data",
        "traffic_error": "Could not load traffic data",
        "locations_error": "Location search failed",
        "waste_needs_setup": "Please set up your address first to see the collection dates.",
        "waste_invalid_url": "Invalid SBAZV URL. The URL must come from the SBAZV calendar export.",
        "waste_unavailable": "SBAZV server temporarily unreachable. Please try again later.",
        "not_found": "Not found",
        "rate_limited": "Too many requests. Please try again later.",
    },
}


def _supported_locales():
    if has_app_context():
        return tuple(current_app.config.get("SUPPORTED_LOCALES", ("de",)))
    return tuple(MESSAGES)


def _default_locale():
    if has_app_context():
        return current_app.config.get("DEFAULT_LOCALE", "de")
    return "de"


def locale_from_path(path: str) -> str | None:
    """Return the locale encoded as the first path segment, if any."""
    first = path.lstrip("/").split("/", 1)[0]
    if first in _supported_locales():
        return first
    return None


def get_locale() -> str:
    """Resolve the locale of the current request.

    Order: path prefix, ``?locale=``, Accept-Language, configured default.
    """
    if not has_request_context():
        return _default_locale()

    locale = locale_from_path(request.path)
    if locale:
        return locale

    supported = _supported_locales()
    requested = request.args.get("locale")
    if requested in supported:
        return requested

    best = request.accept_languages.best_match(supported)
    return best or _default_locale()


def translate(key: str, locale: str | None = None, **params) -> str:
    locale = locale or get_locale()
    catalog = MESSAGES.get(locale) or MESSAGES["de"]
    template = catalog.get(key) or MESSAGES["de"].get(key)
    if template is None:
        logger.warning("Missing translation for key %r (locale %s)", key, locale)
        return key
    return template.format(**params) if params else template
