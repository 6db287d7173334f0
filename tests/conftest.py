"""Pytest fixtures for Flask app testing.

Provides `app` (in-memory SQLite), `offline_app` (no datastore), their test
clients and an `admin_client` that carries a valid admin session cookie.
Every app gets its own maintenance flag file under `tmp_path`, rate limiting
is off and bcrypt uses the cheapest work factor.
"""
from __future__ import annotations

import pytest

from config import Config
from portal import create_app, db

ADMIN_PASSWORD = "correct-horse-battery"


def _base_config(tmp_path, **overrides):
    settings = {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
    settings.update(
        {
            "TESTING": True,
            "SECRET_KEY": "testing-secret-key",
            "ADMIN_PASSWORD": ADMIN_PASSWORD,
            "ADMIN_TOKEN_SECRET": "testing-admin-token-secret",
            "MAINTENANCE_FILE": str(tmp_path / "maintenance.json"),
            # Disable login throttling / rate limiting noise in tests
            "RATELIMIT_ENABLED": False,
            "RATELIMIT_STORAGE_URI": "memory://",
            "BCRYPT_LOG_ROUNDS": 4,
            # Pool sizing does not apply to SQLite's static pool
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "GOOGLE_MAPS_API_KEY": None,
            "OPENWEATHERMAP_API_KEY": None,
        }
    )
    settings.update(overrides)
    return settings


###############################################################################
# Core application & database fixtures
###############################################################################

@pytest.fixture
def app(tmp_path):
    """An app backed by a fresh in-memory SQLite database."""
    app = create_app(_base_config(tmp_path, SQLALCHEMY_DATABASE_URI="sqlite:///:memory:"))

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def offline_app(tmp_path):
    """An app with no datastore configured."""
    return create_app(_base_config(tmp_path, SQLALCHEMY_DATABASE_URI=None))


@pytest.fixture
def client(app):
    """Return an unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def offline_client(offline_app):
    return offline_app.test_client()


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD


@pytest.fixture
def admin_client(client):
    """A test client holding a verified admin session cookie."""
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200, f"Admin login failed with status {response.status_code}"
    return client


@pytest.fixture
def maintenance_file(app):
    return app.config["MAINTENANCE_FILE"]


###############################################################################
# Script helpers
###############################################################################

@pytest.fixture
def mock_project_root(tmp_path, monkeypatch):
    """Point ScriptUtils at a throwaway project root."""
    from scripts import ScriptUtils

    monkeypatch.setattr(ScriptUtils, "get_project_root", staticmethod(lambda: tmp_path))
    return tmp_path


@pytest.fixture
def mock_env_file(mock_project_root):
    env_path = mock_project_root / ".env"
    env_path.write_text(
        "# local settings\n"
        "TEST_KEY1=value1\n"
        "TEST_KEY2=value2\n"
        "TEST_KEY3=value3 with spaces\n"
    )
    return env_path
