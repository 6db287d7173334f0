# tests/unit/test_traffic.py
import random
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from portal import db
from portal.models import TrafficLocation, TrafficStatus
from portal.services import traffic_service
from portal.services.traffic_service import (
    ROUTES,
    TrafficService,
    congestion_factor,
    simulate_segments,
    traffic_level,
    worst_level,
)
from portal.utils.api_request import APITimeoutError


@pytest.mark.parametrize('delay, duration, level', [
    (0, 300, 'frei'),
    (29, 300, 'frei'),
    (30, 300, 'leicht'),
    (75, 300, 'stockend'),
    (150, 300, 'stau'),
])
def test_traffic_level(delay, duration, level):
    assert traffic_level(delay, duration) == level


def test_worst_level():
    assert worst_level([{'level': 'frei'}, {'level': 'stockend'}, {'level': 'leicht'}]) == 'stockend'
    assert worst_level([]) == 'frei'


def test_rush_hour_is_slower_than_night():
    rng = random.Random(1)
    monday_rush = datetime(2026, 10, 19, 8, 0)
    monday_night = datetime(2026, 10, 19, 23, 0)
    assert congestion_factor(monday_rush, rng) < congestion_factor(monday_night, rng) == 1.0


def test_simulation_covers_every_route():
    segments = simulate_segments(datetime(2026, 10, 19, 17, 0), random.Random(3))
    assert [s['id'] for s in segments] == [r['id'] for r in ROUTES]
    assert all(s['delay'] >= 0 for s in segments)


def _routes_response(duration, static, meters):
    response = MagicMock()
    response.json.return_value = {'routes': [
        {'duration': f'{duration}s', 'staticDuration': f'{static}s', 'distanceMeters': meters},
    ]}
    return response


class TestService:
    def test_no_key_means_simulation(self):
        with patch.object(traffic_service, 'safe_request') as request:
            snapshot = TrafficService(api_key=None).snapshot()
        request.assert_not_called()
        assert snapshot['isLive'] is False
        assert len(snapshot['segments']) == len(ROUTES)

    def test_live_segments(self):
        with patch.object(traffic_service, 'safe_request', return_value=_routes_response(400, 300, 4200)) as request:
            snapshot = TrafficService(api_key='key').snapshot()

        assert snapshot['isLive'] is True
        first = snapshot['segments'][0]
        assert first['delay'] == 100
        assert first['level'] == 'stockend'
        assert first['distance'] == 4.2
        assert snapshot['overallLevel'] == 'stockend'
        headers = request.call_args.kwargs['headers']
        assert headers['X-Goog-Api-Key'] == 'key'

    def test_all_routes_failing_falls_back(self):
        with patch.object(traffic_service, 'safe_request', side_effect=APITimeoutError('timeout')):
            snapshot = TrafficService(api_key='key').snapshot()
        assert snapshot['isLive'] is False
        assert len(snapshot['segments']) == len(ROUTES)


class TestRoutes:
    def test_traffic_route(self, client):
        response = client.get('/api/traffic')
        assert response.status_code == 200
        assert response.headers['Cache-Control'] == 'no-store'
        body = response.get_json()
        assert body['isLive'] is False
        assert body['overallLevel'] in ('frei', 'leicht', 'stockend', 'stau')

    def test_traffic_route_failure(self, client):
        with patch.object(TrafficService, 'snapshot', side_effect=RuntimeError('boom')):
            response = client.get('/api/traffic')
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Fehler beim Abrufen der Verkehrsdaten'}

    def test_status_from_database(self, client, app):
        with app.app_context():
            tunnel = TrafficLocation(name='Tunnel Storkower Straße', name_short='Tunnel', sort_order=1)
            crossing = TrafficLocation(name='Bahnübergang', name_short='BÜ', sort_order=2)
            hidden = TrafficLocation(name='Hinterhof', show_on_dashboard=False, sort_order=3)
            db.session.add_all([tunnel, crossing, hidden])
            db.session.flush()
            db.session.add(TrafficStatus(location_id=tunnel.id, status='open', status_level='green',
                                         created_at=datetime(2026, 10, 1)))
            db.session.add(TrafficStatus(location_id=tunnel.id, status='closed', status_level='red',
                                         message='Sperrung', valid_until=datetime(2026, 10, 20, 18, 0),
                                         created_at=datetime(2026, 10, 1) + timedelta(days=1)))
            db.session.commit()

        body = client.get('/api/traffic/status').get_json()
        assert body['source'] == 'database'
        assert [loc['name_short'] for loc in body['locations']] == ['Tunnel', 'BÜ']
        assert body['locations'][0]['status'] == 'closed'
        assert body['locations'][0]['message'] == 'Sperrung'
        assert body['locations'][1]['status_level'] == 'green'

        everything = client.get('/api/traffic/status?dashboard=false').get_json()
        assert len(everything['locations']) == 3
