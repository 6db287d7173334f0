# portal/services/weather_service.py
"""Weather, air quality and pollen for the municipality.

Open-Meteo needs no key and is tried first; OpenWeatherMap is used for
current conditions only when a key is configured and Open-Meteo failed.
"""

import logging
from datetime import datetime

from portal.utils.api_request import APIRequestError, get_json

logger = logging.getLogger(__name__)

OPEN_METEO_FORECAST_URL = 'https://api.open-meteo.com/v1/forecast'
OPEN_METEO_AIR_URL = 'https://air-quality-api.open-meteo.com/v1/air-quality'
OPENWEATHERMAP_URL = 'https://api.openweathermap.org/data/2.5/weather'

# WMO weather interpretation codes -> (description, OpenWeatherMap-style icon base)
WMO_CODES = {
    0: ('Klar', '01'),
    1: ('Überwiegend klar', '01'),
    2: ('Teilweise bewölkt', '02'),
    3: ('Bewölkt', '04'),
    45: ('Nebel', '50'),
    48: ('Reifnebel', '50'),
    51: ('Leichter Nieselregen', '09'),
    53: ('Nieselregen', '09'),
    55: ('Starker Nieselregen', '09'),
    61: ('Leichter Regen', '10'),
    63: ('Regen', '10'),
    65: ('Starker Regen', '10'),
    66: ('Gefrierender Regen', '13'),
    67: ('Starker gefrierender Regen', '13'),
    71: ('Leichter Schneefall', '13'),
    73: ('Schneefall', '13'),
    75: ('Starker Schneefall', '13'),
    77: ('Schneegriesel', '13'),
    80: ('Leichte Regenschauer', '09'),
    81: ('Regenschauer', '09'),
    82: ('Starke Regenschauer', '09'),
    85: ('Leichte Schneeschauer', '13'),
    86: ('Schneeschauer', '13'),
    95: ('Gewitter', '11'),
    96: ('Gewitter mit Hagel', '11'),
    99: ('Gewitter mit starkem Hagel', '11'),
}

POLLEN_FIELDS = ('alder_pollen', 'birch_pollen', 'grass_pollen', 'mugwort_pollen', 'ragweed_pollen')


def describe_wmo(code, is_day=True):
    """Map a WMO code to ``{"description", "icon"}``; unknown codes are cloudy."""
    suffix = 'd' if is_day else 'n'
    description, icon = WMO_CODES.get(code, ('Unbekannt', '03'))
    return {'description': description, 'icon': f'{icon}{suffix}'}


def european_aqi_to_scale(eu_aqi):
    """Collapse the European AQI (0-500) onto the 1-5 scale the widgets use."""
    eu_aqi = eu_aqi or 0
    if eu_aqi > 100:
        return 5
    if eu_aqi > 75:
        return 4
    if eu_aqi > 50:
        return 3
    if eu_aqi > 25:
        return 2
    return 1


class WeatherService:
    def __init__(self, latitude, longitude, openweathermap_key=None, timeout=8):
        self.latitude = latitude
        self.longitude = longitude
        self.openweathermap_key = openweathermap_key
        self.timeout = timeout

    def _coords(self):
        return {'latitude': self.latitude, 'longitude': self.longitude}

    # ------------------------------------------------------------------
    # Current conditions
    # ------------------------------------------------------------------

    def open_meteo_current(self):
        params = {
            **self._coords(),
            'current': 'temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,'
                       'cloud_cover,pressure_msl,wind_speed_10m,wind_direction_10m,is_day',
            'daily': 'sunrise,sunset',
            'timezone': 'Europe/Berlin',
        }
        data = get_json(OPEN_METEO_FORECAST_URL, params=params, timeout=self.timeout)
        return _shape_current(data['current'], data.get('daily') or {})

    def openweathermap_current(self):
        params = {
            'lat': self.latitude,
            'lon': self.longitude,
            'appid': self.openweathermap_key,
            'units': 'metric',
            'lang': 'de',
        }
        data = get_json(OPENWEATHERMAP_URL, params=params, timeout=self.timeout)
        main = data['main']
        wind = data.get('wind') or {}
        condition = (data.get('weather') or [{}])[0]
        sys_info = data.get('sys') or {}
        return {
            'temperature': main.get('temp'),
            'feelsLike': main.get('feels_like'),
            'humidity': main.get('humidity'),
            'windSpeed': round((wind.get('speed') or 0) * 3.6, 1),  # m/s -> km/h
            'windDirection': wind.get('deg'),
            'description': condition.get('description'),
            'icon': condition.get('icon'),
            'pressure': main.get('pressure'),
            'visibility': (data.get('visibility') or 10000) / 1000,
            'clouds': (data.get('clouds') or {}).get('all'),
            'sunrise': _from_unix(sys_info.get('sunrise')),
            'sunset': _from_unix(sys_info.get('sunset')),
        }

    def current(self):
        """Return ``(weather, source)``; raises when every provider failed."""
        try:
            return self.open_meteo_current(), 'open-meteo'
        except (APIRequestError, KeyError, TypeError) as e:
            if not self.openweathermap_key:
                raise
            logger.warning(f"Open-Meteo failed ({e}), trying OpenWeatherMap")
        return self.openweathermap_current(), 'openweathermap'

    # ------------------------------------------------------------------
    # Air quality & pollen
    # ------------------------------------------------------------------

    def air_quality(self):
        params = {
            **self._coords(),
            'current': 'european_aqi,pm10,pm2_5,carbon_monoxide,nitrogen_dioxide,ozone',
        }
        current = get_json(OPEN_METEO_AIR_URL, params=params, timeout=self.timeout)['current']
        return {
            'aqi': european_aqi_to_scale(current.get('european_aqi')),
            'co': current.get('carbon_monoxide') or 0,
            'no2': current.get('nitrogen_dioxide') or 0,
            'o3': current.get('ozone') or 0,
            'pm2_5': current.get('pm2_5') or 0,
            'pm10': current.get('pm10') or 0,
        }

    def pollen(self):
        params = {**self._coords(), 'current': ','.join(POLLEN_FIELDS), 'timezone': 'Europe/Berlin'}
        current = get_json(OPEN_METEO_AIR_URL, params=params, timeout=self.timeout)['current']
        values = {field.replace('_pollen', ''): current.get(field) for field in POLLEN_FIELDS}
        # Outside Europe's pollen season the API answers with nulls only
        if all(value is None for value in values.values()):
            return None
        return values

    # ------------------------------------------------------------------
    # Forecast
    # ------------------------------------------------------------------

    def forecast(self):
        """Current conditions plus the next 24 hours and 7 days."""
        params = {
            **self._coords(),
            'current': 'temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,'
                       'cloud_cover,pressure_msl,wind_speed_10m,wind_direction_10m,is_day',
            'hourly': 'temperature_2m,precipitation_probability,weather_code,is_day',
            'daily': 'weather_code,temperature_2m_max,temperature_2m_min,'
                     'precipitation_sum,precipitation_probability_max,sunrise,sunset',
            'forecast_days': 7,
            'timezone': 'Europe/Berlin',
        }
        data = get_json(OPEN_METEO_FORECAST_URL, params=params, timeout=self.timeout)
        current = data['current']
        hourly = data.get('hourly') or {}
        daily = data.get('daily') or {}

        # Hourly series starts at local midnight; skip to the current hour
        times = hourly.get('time') or []
        is_day = hourly.get('is_day') or [1] * len(times)
        precipitation = hourly.get('precipitation_probability') or [None] * len(times)
        start = _first_index_at_or_after(times, current.get('time'))
        hourly_out = []
        for i in range(start, min(start + 24, len(times))):
            described = describe_wmo(hourly['weather_code'][i], is_day[i] == 1)
            hourly_out.append({
                'time': times[i],
                'temperature': hourly['temperature_2m'][i],
                'precipitationProbability': precipitation[i],
                'description': described['description'],
                'icon': described['icon'],
            })

        daily_out = []
        for i, day in enumerate(daily.get('time') or []):
            described = describe_wmo(daily['weather_code'][i])
            daily_out.append({
                'date': day,
                'tempMax': daily['temperature_2m_max'][i],
                'tempMin': daily['temperature_2m_min'][i],
                'precipitationSum': daily['precipitation_sum'][i],
                'precipitationProbability': daily['precipitation_probability_max'][i],
                'description': described['description'],
                'icon': described['icon'],
                'sunrise': daily['sunrise'][i],
                'sunset': daily['sunset'][i],
            })

        return {'current': _shape_current(current, daily), 'hourly': hourly_out, 'daily': daily_out}


def _from_unix(timestamp):
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp).isoformat()


def _first_index_at_or_after(times, current_time):
    if not current_time:
        return 0
    # ISO strings of the same format compare chronologically
    hour_prefix = current_time[:13]
    for i, value in enumerate(times):
        if value[:13] >= hour_prefix:
            return i
    return 0


def _shape_current(current, daily):
    weather = describe_wmo(current.get('weather_code'), current.get('is_day') == 1)
    return {
        'temperature': current.get('temperature_2m'),
        'feelsLike': current.get('apparent_temperature'),
        'humidity': current.get('relative_humidity_2m'),
        'windSpeed': current.get('wind_speed_10m'),
        'windDirection': current.get('wind_direction_10m'),
        'description': weather['description'],
        'icon': weather['icon'],
        'pressure': current.get('pressure_msl'),
        'visibility': 10,  # km; Open-Meteo reports no visibility
        'clouds': current.get('cloud_cover'),
        'sunrise': (daily.get('sunrise') or [None])[0],
        'sunset': (daily.get('sunset') or [None])[0],
    }
