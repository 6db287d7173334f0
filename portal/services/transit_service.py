# portal/services/transit_service.py
"""Departure boards for the village stops (VBB REST API).

Stop resolution precedence for a request: exact stop id, then address,
then coordinates, then the default stop; if all of that yields nothing the
first three stops are used.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from portal.services.aggregator import gather
from portal.utils.api_request import APIRequestError, get_json

logger = logging.getLogger(__name__)

# Königs Wusterhausen, the regional hub
KW_STATION_ID = '900260001'
KW_STATION_NAME = 'Königs Wusterhausen'
KW_PRODUCTS = ('regional', 'suburban', 'bus')
ALL_PRODUCTS = ('suburban', 'subway', 'tram', 'bus', 'ferry', 'express', 'regional')

DEFAULT_STOP_ID = 'bahnhof'
BOARD_DURATION = 720   # minutes
KW_DURATION = 60       # minutes
DEDUPE_WINDOW = 60     # seconds


def _stop(stop_id, vbb_id, name, lat, lng, regional=False):
    return {
        'id': stop_id,
        'vbbId': vbb_id,
        'name': name,
        'location': {'lat': lat, 'lng': lng},
        'products': {'bus': True, 'regional': regional},
    }


STOPS = [
    _stop('bahnhof', '900260011', 'Zernsdorf, Bahnhof', 52.299358, 13.693241, regional=True),
    _stop('dorfaue', '900261035', 'Zernsdorf, Dorfaue', 52.298971, 13.698239),
    _stop('strandweg', '900261037', 'Zernsdorf, Strandweg', 52.297695, 13.690517, regional=True),
    _stop('an-der-lanke', '900261033', 'Zernsdorf, An der Lanke', 52.306873, 13.701925),
    _stop('bahnuebergang', '900261034', 'Zernsdorf, Bahnübergang', 52.303, 13.699),
    _stop('friedrich-engels-str', '900261039', 'Zernsdorf, Friedrich-Engels-Str.', 52.301, 13.697),
    _stop('nordstr', '900261036', 'Zernsdorf, Nordstr.', 52.308, 13.696),
    _stop('ruetgersstr', '900261052', 'Zernsdorf, Rütgersstr.', 52.295, 13.685),
    _stop('seekorso', '900261038', 'Zernsdorf, Seekorso', 52.309, 13.698),
    _stop('wustroweg', '900261041', 'Zernsdorf, Wustroweg', 52.293, 13.680),
    _stop('zeltplatz', '900261040', 'Zernsdorf, Zeltplatz', 52.311, 13.693),
]

# Street fragments (lower case) -> nearest stops, first match wins
STREET_TO_STOPS = {
    'dorfaue': ['dorfaue', 'bahnhof'],
    'dorfstraße': ['dorfaue', 'bahnhof'],
    'bahnhofstraße': ['bahnhof', 'dorfaue'],
    'am bahnhof': ['bahnhof'],
    'strandweg': ['strandweg', 'dorfaue'],
    'seestraße': ['strandweg', 'dorfaue'],
    'am zeuthener see': ['strandweg'],
    'nordstraße': ['nordstr', 'seekorso'],
    'nordstr': ['nordstr', 'seekorso'],
    'seekorso': ['seekorso', 'nordstr'],
    'an der lanke': ['an-der-lanke', 'seekorso'],
    'lankeweg': ['an-der-lanke'],
    'zeltplatz': ['zeltplatz', 'nordstr'],
    'am zeltplatz': ['zeltplatz'],
    'friedrich-engels-straße': ['friedrich-engels-str', 'bahnuebergang'],
    'friedrich-engels-str': ['friedrich-engels-str', 'bahnuebergang'],
    'karl-marx-straße': ['bahnuebergang', 'friedrich-engels-str'],
    'rütgersstraße': ['ruetgersstr', 'wustroweg'],
    'rütgersstr': ['ruetgersstr', 'wustroweg'],
    'wustroweg': ['wustroweg', 'ruetgersstr'],
    'wustrower weg': ['wustroweg'],
}

_STOPS_BY_ID = {stop['id']: stop for stop in STOPS}


# ---------------------------------------------------------------------------
# Stop resolution
# ---------------------------------------------------------------------------

def find_stop(stop_id):
    """Look a stop up by portal id or VBB id."""
    for stop in STOPS:
        if stop_id in (stop['id'], stop['vbbId']):
            return stop
    return None


def stops_for_address(address):
    normalized = address.lower().strip()
    for street, stop_ids in STREET_TO_STOPS.items():
        if street in normalized:
            return [_STOPS_BY_ID[stop_id] for stop_id in stop_ids if stop_id in _STOPS_BY_ID]
    # Unknown street: the two central stops
    return [stop for stop in STOPS if stop['id'] in ('bahnhof', 'dorfaue')]


def haversine_km(lat1, lng1, lat2, lng2):
    radius = 6371
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    return radius * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def stops_near(lat, lng, limit=3):
    ranked = sorted(STOPS, key=lambda s: haversine_km(lat, lng, s['location']['lat'], s['location']['lng']))
    return ranked[:limit]


def resolve_stops(stop_id=None, address=None, lat=None, lng=None):
    stops = []
    if stop_id:
        stop = find_stop(stop_id)
        if stop:
            stops = [stop]
    elif address:
        stops = stops_for_address(address)
    elif lat is not None and lng is not None:
        stops = stops_near(lat, lng)
    else:
        stops = [_STOPS_BY_ID[DEFAULT_STOP_ID]]

    if not stops:
        stops = STOPS[:3]
    return stops


# ---------------------------------------------------------------------------
# Departures
# ---------------------------------------------------------------------------

def _parse_time(value):
    if not value:
        return None
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def effective_time(departure):
    return _parse_time(departure['actualTime']) or _parse_time(departure['plannedTime'])


def normalize_departure(raw, fallback_stop_id, fallback_stop_name='', hub=False):
    line = raw.get('line') or {}
    product = line.get('product')
    if hub:
        product = 'regional' if product in ('regional', 'suburban', 'express') else 'bus'
    else:
        product = 'regional' if product == 'regional' else 'bus'
    stop = raw.get('stop') or {}
    return {
        'line': line.get('id') or '',
        'lineName': line.get('name') or '',
        'direction': raw.get('direction') or '',
        'plannedTime': raw.get('plannedWhen') or raw.get('when'),
        'actualTime': raw.get('when'),
        'delay': raw.get('delay') or 0,
        'platform': raw.get('platform'),
        'stop': stop.get('name') or fallback_stop_name,
        'stopId': stop.get('id') or fallback_stop_id,
        'product': product,
        'operator': (line.get('operator') or {}).get('name'),
        'cancelled': bool(raw.get('cancelled')),
    }


def merge_departures(boards, limit):
    """Flatten boards, drop cancelled, sort, de-duplicate and cap."""
    departures = [d for board in boards for d in board if not d['cancelled'] and effective_time(d)]
    departures.sort(key=effective_time)

    unique = []
    for departure in departures:
        when = effective_time(departure)
        duplicate = any(
            kept['lineName'] == departure['lineName']
            and kept['direction'] == departure['direction']
            and abs((effective_time(kept) - when).total_seconds()) < DEDUPE_WINDOW
            for kept in unique
        )
        if not duplicate:
            unique.append(departure)
        if len(unique) >= limit:
            break
    return unique


class TransitService:
    def __init__(self, api_base, timeout=8, location_timeout=5):
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.location_timeout = location_timeout

    def _raw_departures(self, vbb_id, params):
        data = get_json(
            f"{self.api_base}/stops/{vbb_id}/departures",
            params=params,
            headers={'Accept': 'application/json'},
            timeout=self.timeout,
        )
        # v6 wraps the board in {"departures": [...]}, older versions return a list
        return data if isinstance(data, list) else data.get('departures') or []

    def departures(self, vbb_id, duration=BOARD_DURATION):
        raw = self._raw_departures(vbb_id, {'duration': duration})
        return [normalize_departure(dep, vbb_id) for dep in raw]

    def board(self, stops, limit=10):
        """Departures for several stops, fetched concurrently.

        A stop whose board fails contributes nothing; the others still count.
        """
        results = gather({
            stop['vbbId']: (lambda vbb_id=stop['vbbId']: self.departures(vbb_id), list)
            for stop in stops
        })
        departures = merge_departures([result.value for result in results.values()], limit)
        return {'departures': departures, 'isLive': bool(departures)}

    def hub_departures(self, products=KW_PRODUCTS, duration=KW_DURATION):
        params = {'duration': duration}
        for product in ALL_PRODUCTS:
            params[product] = 'true' if product in products else 'false'
        try:
            raw = self._raw_departures(KW_STATION_ID, params)
        except APIRequestError as e:
            logger.warning(f"Departures for {KW_STATION_NAME} unavailable: {e.message}")
            return []
        departures = [normalize_departure(dep, KW_STATION_ID, KW_STATION_NAME, hub=True) for dep in raw]
        return [d for d in departures if not d['cancelled']]

    def search_locations(self, query):
        """Free-text stop/address/POI lookup.

        Timeouts and network errors yield ``[]``; an upstream HTTP error is
        re-raised so the route can pass its status on.
        """
        params = {
            'query': query,
            'results': 10,
            'stops': 'true',
            'addresses': 'true',
            'poi': 'true',
            'language': 'de',
            'pretty': 'false',
        }
        try:
            data = get_json(
                f"{self.api_base}/locations",
                params=params,
                headers={'Accept': 'application/json'},
                timeout=self.location_timeout,
            )
        except APIRequestError as e:
            if e.status_code is not None:
                raise
            logger.info(f"Location search for {query!r} failed: {e.message}")
            return []
        return [_shape_location(loc) for loc in data or []]


def _shape_location(loc):
    kind = loc.get('type')
    position = loc.get('location') or {}
    return {
        'type': 'stop' if kind == 'stop' else 'address' if kind == 'location' else 'location',
        'id': loc.get('id'),
        'name': loc.get('name') or loc.get('address') or 'Unbekannt',
        'latitude': position.get('latitude', loc.get('latitude')),
        'longitude': position.get('longitude', loc.get('longitude')),
        'products': loc.get('products'),
    }
