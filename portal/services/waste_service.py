# portal/services/waste_service.py
"""Waste collection dates from the SBAZV calendar export (ICS)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from urllib.parse import parse_qs, quote, urlsplit

from portal.utils.api_request import APIRequestError, safe_request

logger = logging.getLogger(__name__)

PROXY_URL = 'https://api.allorigins.win/raw?url='

STREETS = sorted([
    "Ahornallee", "Akazienallee", "Alte Trift", "Alte Werftstraße", "Am Anger",
    "Am Bahndamm", "Am Fließ", "Am Graben", "Am Krüpelsee", "Am Lankensee",
    "Am Rehgrund", "Am Schiedeholz", "Am Schmulangsberg", "Am Stujangsberg",
    "Am Wiesengrund", "Am Wukrosch", "Amselgrund", "Amselsteg", "Amselweg",
    "An der Bahn", "An der Chaussee", "An der Dahme", "An der Lanke", "An der Ziegelei",
    "Asternsteg", "Bahnhofstraße", "Bahnhofsweg", "Bebelstraße", "Bergstraße",
    "Bindowbrück", "Bindower Weg", "Birkenallee", "Birkensteg", "Birkenweg",
    "Blackbergstell", "Brunhildstraße", "Buersweg", "Chausseestraße",
    "Clara-Zetkin-Straße", "Dahliensteg", "Dannenreicher Straße", "Dannenreicher Weg",
    "Dietrichstraße", "Dorfaue", "Dorfstraße", "Drosselgrund", "Drosselweg",
    "Eckardstraße", "Eichenweg", "Einsiedelweg", "Elfensteig", "Erwin-Schulze-Straße",
    "Feldstraße", "Feldweg", "Finkengrund", "Finkenstraße", "Fischerweg",
    "Fliederweg", "Flurweg", "Fontaneallee", "Fontanestraße", "Forstallee",
    "Friedensaue", "Friedenstraße", "Friedersdorfer Straße", "Friedhofsweg",
    "Friedrich-Engels-Straße", "Friesenstraße", "Fürstenwalder Weg", "Goethestraße",
    "Gräbendorfer Straße", "Grüner Weg", "Gudrunstraße", "Gunterstraße",
    "Gussower Straße", "Gutsstraße", "Hagenstraße", "Hasensprung", "Heidestraße",
    "Heideweg", "Heinrich-Heine-Straße", "Herderstraße", "Hinterkietz", "Hochstraße",
    "Im Gehölz", "Iris-Hahs-Hoffstetter-Straße", "Jägersteig", "Jahnstraße",
    "Johann-Theimer-Straße", "Kablower Chaussee", "Kablower Straße", "Karl-Marx-Straße",
    "Karlsweg", "Kastanienweg", "Kiefernweg", "Knorrsweg", "Körbiskruger Straße",
    "Krimhildstraße", "Krüpelweg", "Landhausstraße", "Lankensteg", "Lessingstraße",
    "Libellenweg", "Lilienthalstraße", "Lindenstraße", "Lindenweg", "Luchstraße",
    "Melli-Beese-Straße", "Mittelstraße", "Mittelweg", "Mühlenweg", "Nelkensteg",
    "Neptunstraße", "Niederlehmer Straße", "Nixenweg", "Nordstraße", "Pappelallee",
    "Parkallee", "Parkpromenade", "Pirolweg", "Platanenallee", "Poseidonstraße",
    "Ringstraße", "Robinienweg", "Roseggerstraße", "Rosensteg", "Rotdornstraße",
    "Rütgersstraße", "Schillerstraße", "Schillingstraße", "Seeblickstraße",
    "Seeidyll", "Seekorso", "Seesteg", "Seestraße", "Segelfliegerdamm",
    "Senziger Weg", "Siegfriedstraße", "Sonnenweg", "Straße A", "Strandweg",
    "Talstraße", "Triftstraße", "Triftweg", "Uckley", "Uckleysteg", "Uferpromenade",
    "Ufersteg", "Uferstraße", "Undinestraße", "Unter den Eichen", "Unter den Kiefern",
    "Vorderkietz", "Wacholderweg", "Wachtelweg", "Waldallee", "Waldsiedlung",
    "Waldstraße", "Weidengrund", "Wendenstraße", "Werftstraße", "Werner-Kubitza-Straße",
    "Wernsdorfer Straße", "Wiesendamm", "Wildpfad", "Wustroweg", "Zernsdorfer Straße",
    "Ziegeleier Straße", "Zum Bahnhof", "Zum Langen Berg", "Zur Heide",
], key=str.casefold)


class WasteFetchError(Exception):
    """Every way of downloading the calendar failed."""


@dataclass
class IcsEvent:
    uid: str
    summary: str
    dtstart: datetime
    dtend: datetime | None = None
    description: str | None = None
    location: str | None = None


@dataclass
class WasteSchedule:
    collections: list = field(default_factory=list)
    address: str | None = None
    source: str = 'sbazv'


SBAZV_HOST = 'fahrzeuge.sbazv.de'


def is_valid_sbazv_url(url):
    """Only the SBAZV calendar export over HTTPS, with location and subscription ids."""
    try:
        parts = urlsplit(url)
        hostname, port = parts.hostname, parts.port
    except ValueError:
        return False
    if parts.scheme != 'https' or hostname != SBAZV_HOST or port not in (None, 443):
        return False
    if parts.username or parts.password:
        return False
    query = parse_qs(parts.query)
    return bool(query.get('StandortID')) and bool(query.get('AboID'))


def parse_ics_date(value):
    """``YYYYMMDD``, ``YYYYMMDDTHHMMSS`` or ``YYYYMMDDTHHMMSSZ``."""
    value = value.strip()
    if len(value) == 8:
        return datetime.strptime(value, '%Y%m%d')
    if value.endswith('Z'):
        return datetime.strptime(value, '%Y%m%dT%H%M%SZ').replace(tzinfo=timezone.utc)
    return datetime.strptime(value[:15], '%Y%m%dT%H%M%S')


def _unfold(content):
    # RFC 5545: a line starting with a space or tab continues the previous one
    return re.sub(r'\r?\n[ \t]', '', content).splitlines()


def parse_ics(content):
    events = []
    current = None
    for line in _unfold(content):
        if line == 'BEGIN:VEVENT':
            current = {}
        elif line == 'END:VEVENT' and current is not None:
            if current.get('uid') and current.get('summary') and current.get('dtstart'):
                events.append(IcsEvent(**current))
            current = None
        elif current is not None and ':' in line:
            key_part, value = line.split(':', 1)
            key = key_part.split(';', 1)[0]
            try:
                if key == 'UID':
                    current['uid'] = value
                elif key == 'SUMMARY':
                    current['summary'] = value.strip()
                elif key == 'DTSTART':
                    current['dtstart'] = parse_ics_date(value)
                elif key == 'DTEND':
                    current['dtend'] = parse_ics_date(value)
                elif key == 'DESCRIPTION':
                    current['description'] = value.replace('\\n', '\n')
                elif key == 'LOCATION':
                    current['location'] = value.replace('\\,', ',').strip()
            except ValueError:
                logger.debug(f"Skipping unparseable {key} value {value!r}")
    return events


def waste_type_for(summary):
    """Map an SBAZV summary to a waste type; Christmas trees and unknowns are None."""
    text = summary.lower()
    if 'weihnacht' in text:
        return None
    if 'restmüll' in text or 'restmuell' in text or 'restabfall' in text:
        return 'restmuell'
    if 'papier' in text:
        return 'papier'
    if 'gelb' in text or 'wertstoff' in text or 'verpackung' in text:
        return 'gelbesack'
    if 'bio' in text:
        return 'bio'
    if 'laub' in text or 'grün' in text:
        return 'laubsaecke'
    return None


def collections_from_events(events, street=None):
    collections = []
    for event in events:
        waste_type = waste_type_for(event.summary)
        if not waste_type:
            continue
        collections.append({
            'id': event.uid,
            'date': event.dtstart.date().isoformat(),
            'type': waste_type,
            'street': street,
        })
    return collections


def schedule_from_ics(content):
    if 'BEGIN:VCALENDAR' not in content:
        raise ValueError('response is not an iCalendar file')

    events = parse_ics(content)
    address = None
    for event in events:
        if event.location:
            address = event.location.split(',', 1)[0].strip() or None
            break
    collections = collections_from_events(events, address)
    logger.info(f"Loaded {len(collections)} collections for {address or 'unknown address'}")
    return WasteSchedule(collections=collections, address=address)


def upcoming(collections, days, today=None):
    today = today or date.today()
    end = today + timedelta(days=days)
    return [c for c in collections if today <= date.fromisoformat(c['date']) <= end]


def next_collection(collections, today=None):
    today = today or date.today()
    for collection in collections:
        if date.fromisoformat(collection['date']) >= today:
            return collection
    return None


class WasteService:
    def __init__(self, timeout=10, proxy_timeout=15):
        self.timeout = timeout
        self.proxy_timeout = proxy_timeout

    def _download(self, url, timeout, accept):
        response = safe_request('get', url, headers={'Accept': accept}, timeout=timeout)
        return response.text

    def fetch_direct(self, ics_url):
        return self._download(ics_url, self.timeout, 'text/calendar, application/ics, */*')

    def fetch_via_proxy(self, ics_url):
        return self._download(
            PROXY_URL + quote(ics_url, safe=''),
            self.proxy_timeout,
            'text/calendar, application/ics, text/plain, */*',
        )

    def schedule(self, ics_url):
        """Download and parse the calendar, direct first, then through the proxy."""
        for name, method in (('direct', self.fetch_direct), ('proxy', self.fetch_via_proxy)):
            try:
                return schedule_from_ics(method(ics_url))
            except (APIRequestError, ValueError) as e:
                logger.warning(f"SBAZV {name} fetch failed: {e}")
        logger.error("SBAZV calendar unavailable, all fetch methods failed")
        raise WasteFetchError('all fetch methods failed')
