# tests/unit/test_directory_routes.py
from datetime import date, timedelta

import pytest

from portal import db
from portal.models import Business, BusinessCategory, Event


@pytest.fixture
def directory(app):
    with app.app_context():
        food = BusinessCategory(name='gastronomy', display_name='Gastronomie', sort_order=1)
        crafts = BusinessCategory(name='crafts', display_name='Handwerk', sort_order=2)
        db.session.add_all([food, crafts])
        db.session.flush()
        db.session.add_all([
            Business(name='Zum Fischer', category_id=food.id, location='Zernsdorf', description='Frischer Fisch'),
            Business(name='Alte Mühle', category_id=food.id, location='Zernsdorf', is_featured=True),
            Business(name='Tischlerei Lange', category_id=crafts.id, location='Kablow'),
            Business(name='Geschlossen', category_id=crafts.id, is_active=False),
        ])
        today = date.today()
        db.session.add_all([
            Event(title='Seefest', start_date=today + timedelta(days=10), category='culture'),
            Event(title='Flohmarkt', start_date=today + timedelta(days=2), category='market'),
            Event(title='Gestern', start_date=today - timedelta(days=1)),
            Event(title='Abgesagt', start_date=today + timedelta(days=1), is_active=False),
        ])
        db.session.commit()


class TestBusinesses:
    def test_featured_first_then_name(self, client, directory):
        body = client.get('/api/businesses').get_json()
        assert body['source'] == 'database'
        assert body['total'] == 3
        assert [b['name'] for b in body['businesses']] == ['Alte Mühle', 'Tischlerei Lange', 'Zum Fischer']

    def test_filter_by_category_name(self, client, directory):
        body = client.get('/api/businesses?category=crafts').get_json()
        assert [b['name'] for b in body['businesses']] == ['Tischlerei Lange']
        assert body['businesses'][0]['category_display_name'] == 'Handwerk'

    def test_filter_by_location(self, client, directory):
        body = client.get('/api/businesses?location=Kablow').get_json()
        assert body['total'] == 1

    def test_search_matches_description(self, client, directory):
        body = client.get('/api/businesses?search=fisch').get_json()
        assert [b['name'] for b in body['businesses']] == ['Zum Fischer']

    def test_pagination(self, client, directory):
        body = client.get('/api/businesses?limit=1&offset=1').get_json()
        assert body['total'] == 3
        assert [b['name'] for b in body['businesses']] == ['Tischlerei Lange']

    def test_categories_from_database(self, client, directory):
        body = client.get('/api/businesses/categories').get_json()
        assert [c['name'] for c in body['categories']] == ['gastronomy', 'crafts']


class TestPublicEvents:
    def test_upcoming_only_by_default(self, client, directory):
        body = client.get('/api/events/public').get_json()
        assert [e['title'] for e in body['events']] == ['Flohmarkt', 'Seefest']
        assert body['total'] == 2

    def test_include_past(self, client, directory):
        body = client.get('/api/events/public?includePast=true').get_json()
        assert body['total'] == 3

    def test_category_filter(self, client, directory):
        body = client.get('/api/events/public?category=culture').get_json()
        assert [e['title'] for e in body['events']] == ['Seefest']

    def test_limit_is_capped(self, client, directory):
        body = client.get('/api/events/public?limit=1').get_json()
        assert len(body['events']) == 1
        assert body['total'] == 2
