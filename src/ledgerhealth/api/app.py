"""Flask application factory."""

import logging
from typing import Optional

from flask import Flask, current_app, jsonify

from ledgerhealth.api.serializers import error_body
from ledgerhealth.config import Settings, load_settings
from ledgerhealth.database.base import Database
from ledgerhealth.database.factories import create_database
from ledgerhealth.domain.errors import DomainError

logger = logging.getLogger(__name__)

DB_CONFIG_KEY = "LEDGERHEALTH_DB"


def create_app(db: Optional[Database] = None, settings: Optional[Settings] = None) -> Flask:
    """Create the HTTP application.

    Args:
        db: Database to serve; built from settings when omitted
        settings: Settings used when no database is given

    Returns:
        Configured Flask app
    """
    from ledgerhealth.api.analytics import analytics_bp
    from ledgerhealth.api.ingestion import ingestion_bp

    if db is None:
        settings = settings or load_settings()
        db = create_database(database_url=settings.database_url, database_path=settings.db_path)

    app = Flask(__name__)
    app.config[DB_CONFIG_KEY] = db
    app.register_blueprint(ingestion_bp)
    app.register_blueprint(analytics_bp)

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        if error.http_status >= 500:
            logger.error("Request failed: %s", error)
        return jsonify(error_body(str(error), error.code)), error.http_status

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    return app


def get_db() -> Database:
    """Database bound to the running app."""
    return current_app.config[DB_CONFIG_KEY]
