"""
Flask Application Factory.

Builds the HTTP surface around an already-wired ``ServiceContainer``:
CORS, JSON error handlers and the API blueprints.  Construction performs
no network I/O, so tests can pass fake services.
"""

from __future__ import annotations

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from supermock.config import AppConfig
from supermock.logger import StructuredLogger
from supermock.routes import register_routes
from supermock.routes.responses import error_response
from supermock.services import ServiceContainer

_HTTP_MESSAGES: dict[int, str] = {
    400: "Invalid JSON body.",
    404: "Not found.",
    405: "Method not allowed.",
    413: "Payload too large.",
}


def create_app(
    config: AppConfig,
    services: ServiceContainer,
    logger: StructuredLogger,
) -> Flask:
    """Create the Flask app for the admin API."""
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_PAYLOAD_BYTES
    app.json.sort_keys = False
    CORS(app, origins=config.CORS_ORIGINS, supports_credentials=True)

    register_routes(app, services, config)

    @app.route("/api/public-config", methods=["GET"])
    def public_config():
        """Browser-safe settings: store URL, anon key, bot-widget site key."""
        return jsonify({
            "supabase_url": config.SUPABASE_URL,
            "supabase_anon_key": config.SUPABASE_ANON_KEY.get_secret_value(),
            "turnstile_site_key": config.TURNSTILE_SITE_KEY,
        })

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        status = exc.code or 500
        return error_response(
            _HTTP_MESSAGES.get(status, exc.description or "Request failed."), status
        )

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.error("Unhandled error: %s", exc, exc_info=True)
        return error_response("An unexpected error occurred.", 500)

    logger.info("Flask app created with %d routes.", len(list(app.url_map.iter_rules())))
    return app
