# tests/unit/test_auth.py
from portal.models.user import User


def _register(client, email='anna@example.com', password='geheim123', **extra):
    return client.post('/api/auth/register', json={'email': email, 'password': password, **extra})


class TestRegistration:
    def test_register_logs_in(self, client):
        response = _register(client, username='anna')
        assert response.status_code == 200
        body = response.get_json()
        assert body['user']['email'] == 'anna@example.com'
        assert body['user']['username'] == 'anna'
        assert 'password_hash' not in body['user']

        me = client.get('/api/auth/me').get_json()
        assert me['user']['email'] == 'anna@example.com'

    def test_email_is_normalized(self, client):
        response = _register(client, email='  Anna@Example.COM ')
        assert response.get_json()['user']['email'] == 'anna@example.com'

    def test_password_is_hashed(self, client, app):
        _register(client)
        with app.app_context():
            user = User.query.filter_by(email='anna@example.com').one()
            assert user.password_hash != 'geheim123'
            assert user.check_password('geheim123')

    def test_duplicate_email(self, client):
        _register(client)
        response = _register(client)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Diese E-Mail-Adresse ist bereits registriert'

    def test_duplicate_username(self, client, app):
        _register(client, username='anna')
        client.post('/api/auth/logout')
        response = _register(client, email='anna2@example.com', username='anna')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Dieser Benutzername ist bereits vergeben'
        with app.app_context():
            assert User.query.count() == 1

    def test_short_password(self, client, app):
        response = _register(client, password='kurz')
        assert response.status_code == 400
        with app.app_context():
            assert User.query.count() == 0

    def test_missing_credentials(self, client):
        response = client.post('/api/auth/register', json={'email': 'x@example.com'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'E-Mail und Passwort erforderlich'

    def test_offline(self, offline_client):
        response = _register(offline_client)
        assert response.status_code == 503


class TestLogin:
    def test_login_and_logout(self, client):
        _register(client)
        client.post('/api/auth/logout')
        assert client.get('/api/auth/me').get_json() == {'user': None}

        response = client.post('/api/auth/login', json={'email': 'anna@example.com', 'password': 'geheim123'})
        assert response.status_code == 200
        assert client.get('/api/auth/me').get_json()['user']['email'] == 'anna@example.com'

    def test_login_records_last_login(self, client, app):
        _register(client)
        client.post('/api/auth/login', json={'email': 'anna@example.com', 'password': 'geheim123'})
        with app.app_context():
            assert User.query.filter_by(email='anna@example.com').one().last_login is not None

    def test_wrong_password(self, client):
        _register(client)
        response = client.post('/api/auth/login', json={'email': 'anna@example.com', 'password': 'falsch123'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Ungültige E-Mail oder Passwort'

    def test_unknown_user(self, client):
        response = client.post('/api/auth/login', json={'email': 'nobody@example.com', 'password': 'whatever1'})
        assert response.status_code == 401

    def test_me_offline(self, offline_client):
        assert offline_client.get('/api/auth/me').get_json() == {'user': None}


class TestPasswordChange:
    def test_requires_login(self, client):
        response = client.post('/api/auth/update-password', json={'password': 'neuesPasswort'})
        assert response.status_code == 401

    def test_change_password(self, client):
        _register(client)
        response = client.post('/api/auth/update-password', json={'password': 'neuesPasswort'})
        assert response.status_code == 200

        client.post('/api/auth/logout')
        old = client.post('/api/auth/login', json={'email': 'anna@example.com', 'password': 'geheim123'})
        new = client.post('/api/auth/login', json={'email': 'anna@example.com', 'password': 'neuesPasswort'})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_rejects_short_password(self, client):
        _register(client)
        response = client.post('/api/auth/update-password', json={'password': 'kurz'})
        assert response.status_code == 400
