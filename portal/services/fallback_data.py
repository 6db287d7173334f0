# portal/services/fallback_data.py
"""Static datasets served when the datastore or an upstream API is missing."""

import copy
from datetime import datetime

FORUM_CATEGORIES = [
    {'id': '1', 'name': 'general', 'display_name': 'Allgemeines', 'icon': 'message-circle', 'color': '#3B82F6', 'posts_count': 0},
    {'id': '2', 'name': 'neighborhood', 'display_name': 'Nachbarschaft', 'icon': 'home', 'color': '#10B981', 'posts_count': 0},
    {'id': '3', 'name': 'events', 'display_name': 'Veranstaltungen', 'icon': 'calendar', 'color': '#8B5CF6', 'posts_count': 0},
    {'id': '4', 'name': 'recommendations', 'display_name': 'Empfehlungen', 'icon': 'star', 'color': '#F59E0B', 'posts_count': 0},
    {'id': '5', 'name': 'questions', 'display_name': 'Fragen & Antworten', 'icon': 'help-circle', 'color': '#EC4899', 'posts_count': 0},
    {'id': '6', 'name': 'announcements', 'display_name': 'Ankündigungen', 'icon': 'megaphone', 'color': '#DC2626', 'posts_count': 0},
]

BULLETIN_CATEGORIES = [
    {'id': '1', 'name': 'offer', 'display_name': 'Biete', 'icon': 'gift', 'color': '#10B981'},
    {'id': '2', 'name': 'search', 'display_name': 'Suche', 'icon': 'search', 'color': '#3B82F6'},
    {'id': '3', 'name': 'lend', 'display_name': 'Verleihe', 'icon': 'repeat', 'color': '#8B5CF6'},
    {'id': '4', 'name': 'borrow', 'display_name': 'Suche zum Leihen', 'icon': 'hand', 'color': '#F59E0B'},
    {'id': '5', 'name': 'help', 'display_name': 'Hilfe anbieten', 'icon': 'heart', 'color': '#EF4444'},
    {'id': '6', 'name': 'help_needed', 'display_name': 'Hilfe gesucht', 'icon': 'life-buoy', 'color': '#EC4899'},
    {'id': '7', 'name': 'lost', 'display_name': 'Verloren', 'icon': 'alert-circle', 'color': '#DC2626'},
    {'id': '8', 'name': 'found', 'display_name': 'Gefunden', 'icon': 'check-circle', 'color': '#059669'},
]

BUSINESS_CATEGORIES = [
    {'id': '1', 'name': 'gastronomy', 'display_name': 'Gastronomie', 'icon': 'utensils', 'color': '#F97316', 'sort_order': 1},
    {'id': '2', 'name': 'health', 'display_name': 'Gesundheit', 'icon': 'heart-pulse', 'color': '#EF4444', 'sort_order': 2},
    {'id': '3', 'name': 'retail', 'display_name': 'Gewerbe & Einkaufen', 'icon': 'shopping-bag', 'color': '#8B5CF6', 'sort_order': 3},
    {'id': '4', 'name': 'crafts', 'display_name': 'Handwerk', 'icon': 'wrench', 'color': '#F59E0B', 'sort_order': 4},
    {'id': '5', 'name': 'clubs', 'display_name': 'Vereine', 'icon': 'users', 'color': '#10B981', 'sort_order': 5},
    {'id': '6', 'name': 'leisure', 'display_name': 'Freizeit & Bildung', 'icon': 'graduation-cap', 'color': '#3B82F6', 'sort_order': 6},
    {'id': '7', 'name': 'services', 'display_name': 'Dienstleistungen', 'icon': 'briefcase', 'color': '#6366F1', 'sort_order': 7},
    {'id': '8', 'name': 'emergency', 'display_name': 'Notdienste', 'icon': 'siren', 'color': '#DC2626', 'sort_order': 8},
]

REPORT_TYPES = [
    {'id': '1', 'name': 'litter', 'display_name': 'Müll / Abfall', 'icon': 'trash-2', 'color': '#F59E0B'},
    {'id': '2', 'name': 'illegal_dump', 'display_name': 'Illegale Müllablagerung', 'icon': 'alert-triangle', 'color': '#DC2626'},
    {'id': '3', 'name': 'graffiti', 'display_name': 'Graffiti / Schmiererei', 'icon': 'pen-tool', 'color': '#8B5CF6'},
    {'id': '4', 'name': 'vandalism', 'display_name': 'Vandalismus', 'icon': 'alert-octagon', 'color': '#EF4444'},
    {'id': '5', 'name': 'broken', 'display_name': 'Defekte Infrastruktur', 'icon': 'tool', 'color': '#6366F1'},
    {'id': '6', 'name': 'green_area', 'display_name': 'Grünflächen-Problem', 'icon': 'trees', 'color': '#10B981'},
    {'id': '7', 'name': 'street', 'display_name': 'Straßenschaden', 'icon': 'construction', 'color': '#F97316'},
    {'id': '8', 'name': 'lighting', 'display_name': 'Beleuchtung defekt', 'icon': 'lightbulb-off', 'color': '#3B82F6'},
    {'id': '9', 'name': 'other', 'display_name': 'Sonstiges', 'icon': 'more-horizontal', 'color': '#6B7280'},
]

TRAFFIC_LOCATIONS = [
    {'id': '1', 'name': 'Tunnel Storkower Straße', 'name_short': 'Tunnel', 'status': 'open', 'status_level': 'green', 'message': None},
    {'id': '2', 'name': 'Bahnübergang Zernsdorf', 'name_short': 'Bahnübergang', 'status': 'open', 'status_level': 'green', 'message': None},
    {'id': '3', 'name': 'Segelfliegerdamm', 'name_short': 'Segelfliegerdamm', 'status': 'open', 'status_level': 'green', 'message': None},
]

AIR_QUALITY = {
    'aqi': 2,
    'co': 230,
    'no2': 12,
    'o3': 45,
    'pm2_5': 8,
    'pm10': 15,
}


def fallback_list(dataset):
    """Return a private copy so callers may decorate rows freely."""
    return copy.deepcopy(dataset)


def fallback_weather(now=None):
    """A plausible autumn reading for the village, day or night icon by local hour."""
    now = now or datetime.now()
    is_day = 7 <= now.hour < 18
    return {
        'temperature': 8.5,
        'feelsLike': 6.2,
        'humidity': 72,
        'windSpeed': 12,
        'windDirection': 270,
        'description': 'Leicht bewölkt',
        'icon': '03d' if is_day else '03n',
        'pressure': 1018,
        'visibility': 10,
        'clouds': 35,
        'sunrise': now.replace(hour=7, minute=45, second=0, microsecond=0).isoformat(),
        'sunset': now.replace(hour=16, minute=30, second=0, microsecond=0).isoformat(),
    }


def fallback_air_quality():
    return dict(AIR_QUALITY)
