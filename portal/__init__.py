# portal/__init__.py
"""Flask application factory and extension initialization."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template, request
from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from config import get_config

# ---------------------------------------------------------------------------
# Extension instances (singletons that will be imported elsewhere)
# ---------------------------------------------------------------------------

db = SQLAlchemy()
migrate = Migrate()
bcrypt = Bcrypt()
login_manager = LoginManager()
limiter = Limiter(key_func=get_remote_address, default_limits=["2000 per day", "300 per hour"])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_app(test_config: dict | None = None):
    """Application factory used by run.py and WSGI servers."""

    load_dotenv()

    app = Flask(__name__)

    # Config
    if test_config is None:
        app.config.from_object(get_config())
    else:
        app.config.update(test_config)

    # Logging defaults
    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    # ---------------------------------------------------------------------
    # Extension init
    # ---------------------------------------------------------------------
    bcrypt.init_app(app)
    limiter.init_app(app)
    login_manager.init_app(app)

    # The datastore is optional; without a URI the portal serves fallback
    # data and refuses writes with 503.
    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        db.init_app(app)
        migrate.init_app(app, db)
        _bootstrap_database(app)
    else:
        app.logger.warning("No datastore configured - running in offline mode.")

    from portal.models.user import load_user
    login_manager.user_loader(load_user)

    # ---------------------------------------------------------------------
    # Maintenance gate (runs before every request)
    # ---------------------------------------------------------------------
    from portal.middleware.maintenance_gate import maintenance_gate

    app.before_request(maintenance_gate)

    # ---------------------------------------------------------------------
    # Blueprints
    # ---------------------------------------------------------------------
    from portal.routes import bp as main_bp
    from portal.routes.pages import bp as pages_bp
    from portal.routes.admin import bp as admin_bp
    from portal.routes.auth import bp as auth_bp
    from portal.routes.directory import bp as directory_bp
    from portal.routes.community import bp as community_bp
    from portal.routes.weather import bp as weather_bp
    from portal.routes.mobility import bp as mobility_bp
    from portal.routes.waste import bp as waste_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(pages_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(directory_bp)
    app.register_blueprint(community_bp)
    app.register_blueprint(weather_bp)
    app.register_blueprint(mobility_bp)
    app.register_blueprint(waste_bp)

    _register_error_handlers(app)

    @app.route("/health")
    def _health():
        from portal.services.datastore import datastore
        from portal.services.maintenance import get_store

        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "datastore": "configured" if datastore.is_configured() else "offline",
            "maintenance": get_store().read().enabled,
        }, 200

    return app


def _bootstrap_database(app: Flask) -> None:
    """Create missing tables and fail fast if the database is unreachable."""
    with app.app_context():
        from portal import models  # noqa: F401 - registers all tables

        inspector = inspect(db.engine)
        if not inspector.has_table("businesses"):
            db.create_all()
            app.logger.info("Initial database tables created.")

        # Sanity query so we fail fast if DB unreachable
        db.session.execute(text("SELECT 1"))
        app.logger.info("Datastore configured (%s).", db.engine.url.get_backend_name())


def _register_error_handlers(app: Flask) -> None:
    from portal.i18n import get_locale, translate
    from portal.utils.http import InvalidRequestBody, json_error

    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return json_error("not_found", 404)
        return render_template("404.html", locale=get_locale()), 404

    @app.errorhandler(429)
    def _429(e):
        return jsonify({"error": translate("rate_limited")}), 429

    @app.errorhandler(InvalidRequestBody)
    def _invalid_body(e):
        logger.warning("Rejected request body on %s: %s", request.path, e)
        return json_error("request_failed", 500)

    @app.errorhandler(SQLAlchemyError)
    def _database_error(e):
        logger.error("Database error on %s: %s", request.path, e, exc_info=True)
        db.session.rollback()
        return json_error("internal_error", 500)

    @app.errorhandler(500)
    def _500(e):
        logger.error("Unhandled 500: %s", e, exc_info=True)
        return json_error("internal_error", 500)
