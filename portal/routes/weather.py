# portal/routes/weather.py
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from portal.i18n import translate
from portal.services.aggregator import gather
from portal.services.fallback_data import fallback_air_quality, fallback_weather
from portal.services.weather_service import WeatherService
from portal.utils.cache_control import cache_hint

bp = Blueprint('weather', __name__, url_prefix='/api/weather')


def _service():
    config = current_app.config
    return WeatherService(
        config['PORTAL_LATITUDE'],
        config['PORTAL_LONGITUDE'],
        openweathermap_key=config.get('OPENWEATHERMAP_API_KEY'),
        timeout=config['UPSTREAM_TIMEOUT'],
    )


def _now():
    return datetime.now(timezone.utc).isoformat()


@bp.route('', methods=['GET'])
@cache_hint(300)
def current_weather():
    service = _service()
    results = gather({
        'weather': (service.current, lambda: (fallback_weather(), 'fallback')),
        'airQuality': (service.air_quality, fallback_air_quality),
    })
    weather, source = results['weather'].value
    body = {
        'weather': weather,
        'airQuality': results['airQuality'].value,
        'isLive': results['weather'].is_live,
        'source': source,
        'lastUpdated': _now(),
        'sources': {name: result.is_live for name, result in results.items()},
    }
    if not results['weather'].is_live:
        body['error'] = translate('weather_unavailable')
    return jsonify(body)


@bp.route('/forecast', methods=['GET'])
@cache_hint(0)
def forecast():
    service = _service()
    results = gather({
        'forecast': (service.forecast, None),
        'airQuality': (service.air_quality, fallback_air_quality),
        'pollen': (service.pollen, None),
    })

    if not results['forecast'].is_live:
        return jsonify({
            'current': fallback_weather(),
            'hourly': [],
            'daily': [],
            'airQuality': results['airQuality'].value,
            'pollen': None,
            'isLive': False,
            'source': 'fallback',
            'error': translate('weather_unavailable'),
            'lastUpdated': _now(),
        })

    return jsonify({
        **results['forecast'].value,
        'airQuality': results['airQuality'].value,
        'pollen': results['pollen'].value,
        'isLive': True,
        'source': 'open-meteo',
        'lastUpdated': _now(),
    })
