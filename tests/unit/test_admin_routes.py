# tests/unit/test_admin_routes.py
from datetime import date, timedelta

import jwt

from portal.models import Business, Event


class TestAdminSession:
    def test_login_sets_httponly_strict_cookie(self, client, app, admin_password):
        response = client.post('/api/admin/login', json={'password': admin_password})

        assert response.status_code == 200
        assert response.get_json() == {'success': True}
        cookie = response.headers['Set-Cookie']
        assert cookie.startswith(app.config['ADMIN_SESSION_COOKIE'] + '=')
        assert 'HttpOnly' in cookie
        assert 'SameSite=Strict' in cookie

    def test_cookie_is_a_signed_token(self, client, app, admin_password):
        client.post('/api/admin/login', json={'password': admin_password})
        token = client.get_cookie(app.config['ADMIN_SESSION_COOKIE']).value

        claims = jwt.decode(token, app.config['ADMIN_TOKEN_SECRET'], algorithms=['HS256'])
        assert claims['sub'] == 'admin'
        assert claims['exp'] > claims['iat']

    def test_wrong_password(self, client):
        response = client.post('/api/admin/login', json={'password': 'nope'})
        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'error': 'Falsches Passwort'}

    def test_wrong_password_english(self, client):
        response = client.post('/api/admin/login', json={'password': 'nope'},
                               headers={'Accept-Language': 'en'})
        assert response.get_json()['error'] == 'Wrong password'

    def test_missing_password_config(self, client, app):
        app.config['ADMIN_PASSWORD'] = None
        response = client.post('/api/admin/login', json={'password': 'anything'})
        assert response.status_code == 503
        assert response.get_json()['success'] is False

    def test_malformed_body_is_request_failure(self, client):
        response = client.post('/api/admin/login', data='not json', content_type='application/json')
        assert response.status_code == 500
        assert response.get_json()['error'] == 'Die Anfrage konnte nicht verarbeitet werden'

    def test_session_endpoint(self, admin_client):
        assert admin_client.get('/api/admin/session').get_json() == {'authenticated': True}

    def test_logout_clears_session(self, admin_client):
        admin_client.post('/api/admin/logout')
        assert admin_client.get('/api/admin/session').get_json() == {'authenticated': False}

    def test_expired_token_rejected(self, client, app):
        token = jwt.encode(
            {'sub': 'admin', 'exp': 1, 'iat': 0},
            app.config['ADMIN_TOKEN_SECRET'],
            algorithm='HS256',
        )
        client.set_cookie(app.config['ADMIN_SESSION_COOKIE'], token)
        assert client.get('/api/admin/session').get_json() == {'authenticated': False}

    def test_token_signed_with_other_secret_rejected(self, client, app):
        token = jwt.encode({'sub': 'admin', 'exp': 4102444800}, 'someone-else', algorithm='HS256')
        client.set_cookie(app.config['ADMIN_SESSION_COOKIE'], token)
        assert client.get('/api/admin/session').get_json() == {'authenticated': False}


class TestMaintenanceEndpoints:
    def test_status_is_public(self, client):
        response = client.get('/api/admin/maintenance')
        assert response.status_code == 200
        assert response.get_json()['enabled'] is False

    def test_enable_requires_admin(self, client):
        response = client.post('/api/admin/maintenance', json={'message': 'x'})
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Nicht autorisiert'}

    def test_enable_and_disable(self, admin_client):
        response = admin_client.post('/api/admin/maintenance',
                                     json={'message': 'Server-Umzug', 'estimatedEnd': '18:00'})
        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['enabled'] is True
        assert body['message'] == 'Server-Umzug'
        assert body['revision'] == 1

        status = admin_client.get('/api/admin/maintenance').get_json()
        assert status['enabled'] is True
        assert status['estimatedEnd'] == '18:00'

        response = admin_client.delete('/api/admin/maintenance')
        assert response.get_json() == {'success': True, 'enabled': False, 'revision': 2}

    def test_enable_without_body(self, admin_client):
        response = admin_client.post('/api/admin/maintenance')
        assert response.status_code == 200
        assert response.get_json()['message'].startswith('Die Website wird gerade gewartet')

    def test_stale_revision_conflict(self, admin_client):
        admin_client.post('/api/admin/maintenance', json={'message': 'first'})

        response = admin_client.post('/api/admin/maintenance', json={'message': 'second', 'revision': 0})
        assert response.status_code == 409
        assert response.get_json()['current']['message'] == 'first'

    def test_if_match_header(self, admin_client):
        admin_client.post('/api/admin/maintenance', json={})

        stale = admin_client.delete('/api/admin/maintenance', headers={'If-Match': '"0"'})
        assert stale.status_code == 409

        fresh = admin_client.delete('/api/admin/maintenance', headers={'If-Match': 'W/"1"'})
        assert fresh.status_code == 200

    def test_unwritable_flag_file(self, admin_client, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError('read-only file system')

        monkeypatch.setattr('portal.services.maintenance.MaintenanceStore._atomic_write', fail)
        response = admin_client.post('/api/admin/maintenance', json={})
        assert response.status_code == 500
        assert response.get_json()['error'] == 'Fehler beim Aktivieren des Wartungsmodus'


class TestStats:
    def test_requires_admin(self, client):
        assert client.get('/api/admin/stats').status_code == 401

    def test_counts(self, admin_client, app):
        from portal import db

        with app.app_context():
            db.session.add(Business(name='Bäckerei'))
            db.session.add(Business(name='Geschlossen', is_active=False))
            db.session.add(Event(title='Seefest', start_date=date.today() + timedelta(days=3)))
            db.session.add(Event(title='Vorbei', start_date=date.today() - timedelta(days=3)))
            db.session.commit()

        stats = admin_client.get('/api/admin/stats').get_json()['stats']
        assert stats['businesses_count'] == 2
        assert stats['businesses_active'] == 1
        assert stats['events_upcoming'] == 1
        assert stats['users_count'] == 0


class TestContentCreation:
    def test_create_event(self, admin_client):
        response = admin_client.post('/api/admin/events', json={
            'title': 'Seefest',
            'start_date': '2026-07-04',
            'start_time': '14:00',
            'location_name': 'Strandbad',
            'unknown_field': 'ignored',
        })
        assert response.status_code == 201
        event = response.get_json()['event']
        assert event['title'] == 'Seefest'
        assert event['start_date'] == '2026-07-04'
        assert event['start_time'] == '14:00:00'
        assert event['category'] == 'general'
        assert 'unknown_field' not in event

    def test_create_event_string_flags(self, admin_client):
        response = admin_client.post('/api/admin/events', json={
            'title': 'Seefest',
            'start_date': '2026-07-04',
            'is_active': 'false',
            'is_featured': 'true',
            'is_all_day': '0',
        })
        assert response.status_code == 201
        event = response.get_json()['event']
        assert event['is_active'] is False
        assert event['is_featured'] is True
        assert event['is_all_day'] is False

    def test_create_event_missing_title(self, admin_client):
        response = admin_client.post('/api/admin/events', json={'start_date': '2026-07-04'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Pflichtfeld fehlt: title'

    def test_create_event_invalid_date(self, admin_client):
        response = admin_client.post('/api/admin/events', json={'title': 'x', 'start_date': '04.07.2026'})
        assert response.status_code == 400

    def test_create_business_defaults(self, admin_client, app):
        response = admin_client.post('/api/admin/businesses', json={'name': 'Fischerei Kuhnert'})
        assert response.status_code == 201
        business = response.get_json()['business']
        assert business['city'] == app.config['PORTAL_LOCATION_NAME']
        assert business['postal_code'] == app.config['PORTAL_POSTAL_CODE']
        assert business['is_active'] is True

    def test_create_requires_admin(self, client):
        response = client.post('/api/admin/businesses', json={'name': 'x'})
        assert response.status_code == 401

    def test_create_offline(self, offline_client, admin_password):
        offline_client.post('/api/admin/login', json={'password': admin_password})
        response = offline_client.post('/api/admin/events', json={'title': 'x', 'start_date': '2026-01-01'})
        assert response.status_code == 503
        assert response.get_json()['error'] == 'Datenbank nicht konfiguriert'
