# tests/unit/test_datastore.py
import pytest
from sqlalchemy.exc import OperationalError

from portal.models import Business
from portal.services.datastore import Available, Unavailable, datastore


def test_unavailable_without_datastore(offline_app):
    with offline_app.app_context():
        assert datastore.is_configured() is False
        result = datastore.read(lambda session: pytest.fail('must not run'))
        assert isinstance(result, Unavailable)
        assert result.available is False
        assert result.reason == 'not_configured'


def test_write_commits(app):
    with app.app_context():
        result = datastore.write(lambda session: session.add(Business(name='Kiosk')))
        assert isinstance(result, Available)
        count = datastore.read(lambda session: session.query(Business).count())
        assert count.value == 1


def test_write_rolls_back_on_error(app):
    def explode(session):
        session.add(Business(name='Halb'))
        session.flush()
        raise OperationalError('INSERT', {}, Exception('disk full'))

    with app.app_context():
        with pytest.raises(OperationalError):
            datastore.write(explode)
        assert datastore.read(lambda session: session.query(Business).count()).value == 0


def test_app_starts_with_datastore(caplog, app):
    messages = [record.getMessage() for record in caplog.get_records('setup')]
    assert 'Datastore configured (sqlite).' in messages
    with app.app_context():
        assert datastore.is_configured() is True
