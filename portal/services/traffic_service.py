# portal/services/traffic_service.py
"""Traffic on the roads out of the village.

With a Google Maps key the fixed routes are queried through the Routes API
(traffic aware). Without a key, or when no route answered, a time-of-day
simulation stands in and the result is marked ``isLive: false``.
"""

import logging
import random
from datetime import datetime, timezone

from portal.services.aggregator import gather
from portal.utils.api_request import safe_request

logger = logging.getLogger(__name__)

ROUTES_API_URL = 'https://routes.googleapis.com/directions/v2:computeRoutes'
FIELD_MASK = 'routes.duration,routes.staticDuration,routes.distanceMeters,routes.travelAdvisory'

LEVELS = ('frei', 'leicht', 'stockend', 'stau')

ROUTES = [
    {
        'id': 'l30_kw',
        'name': 'L30 → Königs Wusterhausen',
        'origin': (52.2847, 13.6083),
        'destination': (52.2967, 13.6336),
    },
    {
        'id': 'l30_kablow',
        'name': 'L30 → Kablow',
        'origin': (52.2847, 13.6083),
        'destination': (52.2650, 13.5850),
    },
    {
        'id': 'a10',
        'name': 'A10 (Schönefelder Kreuz)',
        'origin': (52.2967, 13.6336),
        'destination': (52.3400, 13.5200),
    },
]

# Free-flow profile used by the simulation: (speed km/h, distance km, seconds, factor offset)
SIMULATION_PROFILE = {
    'l30_kw': (50, 4.2, 300, 0.0),
    'l30_kablow': (50, 3.1, 220, 0.1),
    'a10': (120, 15.0, 450, -0.1),
}


def traffic_level(delay, duration):
    ratio = delay / (duration or 1)
    if ratio < 0.1:
        return 'frei'
    if ratio < 0.25:
        return 'leicht'
    if ratio < 0.5:
        return 'stockend'
    return 'stau'


def worst_level(segments):
    worst = 'frei'
    for segment in segments:
        if LEVELS.index(segment['level']) > LEVELS.index(worst):
            worst = segment['level']
    return worst


def _seconds(value):
    # Routes API durations look like "300s"
    if not value:
        return 0
    return int(float(str(value).rstrip('s')))


def congestion_factor(now, rng=random):
    """Share of free-flow speed expected at ``now`` (1.0 = no congestion)."""
    if now.weekday() < 5:
        hour = now.hour
        if 7 <= hour <= 9:
            return 0.6 + rng.random() * 0.2
        if 16 <= hour <= 18:
            return 0.55 + rng.random() * 0.25
        if 11 <= hour <= 14:
            return 0.85 + rng.random() * 0.1
        return 1.0
    return 0.9 + rng.random() * 0.1


def simulate_segments(now=None, rng=random):
    now = now or datetime.now()
    factor = congestion_factor(now, rng)
    segments = []
    for route in ROUTES:
        free_speed, distance, duration, offset = SIMULATION_PROFILE[route['id']]
        route_factor = factor + offset
        in_traffic = round(duration / route_factor)
        delay = max(0, in_traffic - duration)
        segments.append({
            'id': route['id'],
            'name': route['name'],
            'level': traffic_level(delay, duration),
            'speed': round(free_speed * route_factor),
            'freeFlowSpeed': free_speed,
            'delay': delay,
            'distance': distance,
            'duration': duration,
            'durationInTraffic': in_traffic,
        })
    return segments


class TrafficService:
    def __init__(self, api_key=None, timeout=8):
        self.api_key = api_key
        self.timeout = timeout

    def route_segment(self, route):
        body = {
            'origin': {'location': {'latLng': {'latitude': route['origin'][0], 'longitude': route['origin'][1]}}},
            'destination': {'location': {'latLng': {'latitude': route['destination'][0], 'longitude': route['destination'][1]}}},
            'travelMode': 'DRIVE',
            'routingPreference': 'TRAFFIC_AWARE',
            'computeAlternativeRoutes': False,
            'languageCode': 'de',
        }
        headers = {
            'Content-Type': 'application/json',
            'X-Goog-Api-Key': self.api_key,
            'X-Goog-FieldMask': FIELD_MASK,
        }
        data = safe_request('post', ROUTES_API_URL, json=body, headers=headers, timeout=self.timeout).json()
        routes = data.get('routes') or []
        if not routes:
            return None

        first = routes[0]
        in_traffic = _seconds(first.get('duration'))
        static = _seconds(first.get('staticDuration'))
        distance_km = (first.get('distanceMeters') or 0) / 1000
        delay = max(0, in_traffic - static)
        free_speed = distance_km / static * 3600 if static > 0 else 50
        speed = distance_km / in_traffic * 3600 if in_traffic > 0 else free_speed
        return {
            'id': route['id'],
            'name': route['name'],
            'level': traffic_level(delay, static or 1),
            'speed': round(speed),
            'freeFlowSpeed': round(free_speed),
            'delay': delay,
            'distance': round(distance_km, 1),
            'duration': static,
            'durationInTraffic': in_traffic,
        }

    def live_segments(self):
        if not self.api_key:
            return []
        results = gather({
            route['id']: (lambda route=route: self.route_segment(route), None)
            for route in ROUTES
        })
        return [results[route['id']].value for route in ROUTES if results[route['id']].is_live]

    def snapshot(self):
        segments = self.live_segments()
        is_live = bool(segments)
        if not is_live:
            segments = simulate_segments()
        return {
            'segments': segments,
            'overallLevel': worst_level(segments),
            'lastUpdated': datetime.now(timezone.utc).isoformat(),
            'isLive': is_live,
        }
