# config.py
import os
import secrets
from pathlib import Path
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _database_url():
    """Pick the datastore connection from the environment.

    Returns None when nothing is configured; the portal then runs in
    offline mode (empty lists, 503 on writes) instead of failing startup.
    """
    url = os.environ.get('DATABASE_URL') or os.environ.get('SUPABASE_DB_URL')
    if url:
        # Supabase/Heroku style URLs still use the legacy scheme
        if url.startswith('postgres://'):
            url = 'postgresql://' + url[len('postgres://'):]
        return url

    host = os.environ.get('MYSQL_HOST')
    user = os.environ.get('MYSQL_USER')
    database = os.environ.get('MYSQL_DATABASE')
    if host and user and database:
        password = os.environ.get('MYSQL_PASSWORD', '')
        port = os.environ.get('MYSQL_PORT', '3306')
        return f"mysql+pymysql://{user}:{password}@{host}:{port}/{database}"

    return None


class Config:
    # --- Datastore ----------------------------------------------------------
    SQLALCHEMY_DATABASE_URI = _database_url()
    # Database connection pool settings
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,  # Enables automatic reconnection
        'pool_recycle': 300,    # Recycle connections every 5 minutes
        'pool_size': 10         # Maximum number of connections to keep
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- Stable SECRET_KEY -------------------------------------------------
    # If SECRET_KEY not provided via environment, generate it once and store
    # it under instance/.flask_secret_key so that resident sessions and admin
    # tokens survive restarts.
    _secret_key_env = os.environ.get('SECRET_KEY')
    if _secret_key_env:
        SECRET_KEY = _secret_key_env
    else:
        _secret_file = Path(basedir) / 'instance' / '.flask_secret_key'
        if _secret_file.exists():
            SECRET_KEY = _secret_file.read_text().strip()
        else:
            _secret_file.parent.mkdir(parents=True, exist_ok=True)
            SECRET_KEY = secrets.token_hex(32)
            _secret_file.write_text(SECRET_KEY)

    # --- Admin area ----------------------------------------------------------
    # No default password: without ADMIN_PASSWORD the admin login answers 503
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    ADMIN_TOKEN_SECRET = os.environ.get('ADMIN_TOKEN_SECRET') or SECRET_KEY
    ADMIN_SESSION_COOKIE = 'admin-session'
    ADMIN_SESSION_LIFETIME = timedelta(hours=24)
    ADMIN_COOKIE_SECURE = False

    # --- Maintenance mode ----------------------------------------------------
    MAINTENANCE_FILE = os.environ.get('MAINTENANCE_FILE') or os.path.join(basedir, '.maintenance')
    MAINTENANCE_EXEMPT_PREFIXES = ('admin', 'maintenance', 'api', 'static', 'health')

    # --- Localization --------------------------------------------------------
    SUPPORTED_LOCALES = ('de', 'en')
    DEFAULT_LOCALE = 'de'

    # --- Municipality defaults ----------------------------------------------
    PORTAL_LOCATION_NAME = os.environ.get('PORTAL_LOCATION_NAME', 'Zernsdorf')
    PORTAL_POSTAL_CODE = os.environ.get('PORTAL_POSTAL_CODE', '15712')
    PORTAL_LATITUDE = float(os.environ.get('PORTAL_LATITUDE', 52.2847))
    PORTAL_LONGITUDE = float(os.environ.get('PORTAL_LONGITUDE', 13.6083))

    # --- Third-party APIs ----------------------------------------------------
    GOOGLE_MAPS_API_KEY = os.environ.get('GOOGLE_MAPS_API_KEY')
    OPENWEATHERMAP_API_KEY = os.environ.get('OPENWEATHERMAP_API_KEY')
    VBB_API_BASE = os.environ.get('VBB_API_BASE', 'https://v6.vbb.transport.rest')
    UPSTREAM_TIMEOUT = 8          # seconds, per upstream call
    LOCATION_LOOKUP_TIMEOUT = 5   # seconds
    WASTE_FETCH_TIMEOUT = 10      # seconds, direct ICS download
    WASTE_PROXY_TIMEOUT = 15      # seconds, ICS download through proxy

    # --- Rate limiting -------------------------------------------------------
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # --- Resident accounts ---------------------------------------------------
    BCRYPT_LOG_ROUNDS = 12
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    DEBUG = True
    FLASK_ENV = 'development'


class ProductionConfig(Config):
    DEBUG = False
    FLASK_ENV = 'production'

    # Enhance security in production
    SESSION_COOKIE_SECURE = True
    ADMIN_COOKIE_SECURE = True


# Function to get the appropriate config
def get_config():
    env = os.environ.get('FLASK_ENV', 'development').lower()
    if env == 'production':
        return ProductionConfig()
    return DevelopmentConfig()
