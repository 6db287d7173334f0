# tests/unit/test_offline_mode.py
"""Without a datastore the portal keeps serving reads and refuses writes."""
import pytest

from portal.services.fallback_data import (
    BULLETIN_CATEGORIES,
    BUSINESS_CATEGORIES,
    FORUM_CATEGORIES,
    REPORT_TYPES,
)


def test_health_reports_offline(offline_client):
    body = offline_client.get('/health').get_json()
    assert body['status'] == 'ok'
    assert body['datastore'] == 'offline'
    assert body['maintenance'] is False


def test_health_reports_configured(client):
    assert client.get('/health').get_json()['datastore'] == 'configured'


@pytest.mark.parametrize('path', ['/api/forum', '/api/bulletin', '/api/pets', '/api/report', '/api/factcheck'])
def test_lists_are_empty(offline_client, path):
    response = offline_client.get(path)
    assert response.status_code == 200
    assert response.get_json() == []


def test_businesses_empty(offline_client):
    assert offline_client.get('/api/businesses').get_json() == {'businesses': [], 'total': 0, 'source': 'none'}


def test_events_empty(offline_client):
    assert offline_client.get('/api/events/public').get_json() == {'events': [], 'total': 0}


@pytest.mark.parametrize('path, expected', [
    ('/api/forum/categories', FORUM_CATEGORIES),
    ('/api/bulletin/categories', BULLETIN_CATEGORIES),
    ('/api/report/types', REPORT_TYPES),
])
def test_category_fallbacks(offline_client, path, expected):
    assert offline_client.get(path).get_json() == expected


def test_business_category_fallback(offline_client):
    body = offline_client.get('/api/businesses/categories').get_json()
    assert body == {'categories': BUSINESS_CATEGORIES}


def test_traffic_status_fallback(offline_client):
    body = offline_client.get('/api/traffic/status').get_json()
    assert body['source'] == 'fallback'
    assert len(body['locations']) == 3
    assert all(loc['status_level'] == 'green' for loc in body['locations'])


@pytest.mark.parametrize('path, payload', [
    ('/api/forum', {'title': 't', 'content': 'c', 'author_name': 'a'}),
    ('/api/bulletin', {'title': 't', 'content': 'c', 'author_name': 'a'}),
    ('/api/pets', {'alert_type': 'lost', 'pet_type': 'dog', 'description': 'd', 'contact_name': 'c'}),
    ('/api/report', {'report_type': 'litter', 'title': 't', 'description': 'd', 'location_description': 'l'}),
])
def test_writes_refused(offline_client, path, payload):
    response = offline_client.post(path, json=payload)
    assert response.status_code == 503
    assert response.get_json() == {'error': 'Datenbank nicht konfiguriert'}


def test_write_refused_before_body_validation(offline_client):
    response = offline_client.post('/api/forum', json={})
    assert response.status_code == 503


def test_stats_zeroed(offline_client, admin_password):
    offline_client.post('/api/admin/login', json={'password': admin_password})
    stats = offline_client.get('/api/admin/stats').get_json()['stats']
    assert set(stats.values()) == {0}
