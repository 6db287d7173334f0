# tests/unit/test_maintenance_gate.py
import pytest

from portal.middleware.maintenance_gate import is_exempt_path
from portal.services.maintenance import MaintenanceStore

PREFIXES = ('admin', 'maintenance', 'api', 'static', 'health')
LOCALES = ('de', 'en')


@pytest.mark.parametrize("path, exempt", [
    ("/api/weather", True),
    ("/de/admin", True),
    ("/en/maintenance", True),
    ("/health", True),
    ("/static/app.css", True),
    ("/de/events", False),
    ("/", False),
    ("/de/", False),
    ("/apiary", False),
    ("/de/administration", False),
])
def test_is_exempt_path(path, exempt):
    assert is_exempt_path(path, PREFIXES, LOCALES) is exempt


@pytest.fixture
def enabled(app):
    MaintenanceStore(app.config["MAINTENANCE_FILE"]).enable(message="Wir bauen um")


def test_pages_served_when_maintenance_off(client):
    response = client.get('/de/events')
    assert response.status_code == 200


def test_visitor_redirected_during_maintenance(client, enabled):
    response = client.get('/de/events')
    assert response.status_code == 307
    assert response.headers['Location'].endswith('/de/maintenance')


def test_redirect_keeps_visitor_locale(client, enabled):
    response = client.get('/en/weather')
    assert response.status_code == 307
    assert response.headers['Location'].endswith('/en/maintenance')


def test_maintenance_page_shows_notice(client, enabled):
    response = client.get('/de/maintenance')
    assert response.status_code == 200
    assert 'Wir bauen um' in response.get_data(as_text=True)


def test_api_not_gated(offline_client, offline_app):
    MaintenanceStore(offline_app.config["MAINTENANCE_FILE"]).enable()
    response = offline_client.get('/api/businesses')
    assert response.status_code == 200


def test_admin_passes_gate(admin_client, enabled):
    response = admin_client.get('/de/events')
    assert response.status_code == 200


def test_forged_cookie_does_not_pass_gate(client, app, enabled):
    client.set_cookie(app.config['ADMIN_SESSION_COOKIE'], 'authenticated')
    response = client.get('/de/events')
    assert response.status_code == 307


def test_health_reports_maintenance(client, enabled):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['maintenance'] is True
