"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time — this enables:
           - Multiple isolated test app instances
           - `alembic` to import the models without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure the package log level from LOG_LEVEL
  3. Initialise SQLAlchemy via init_app()
  4. Register all route blueprints under /api/v1
  5. Register global error handlers (AppError → JSON, Exception → 500)

Note on model imports:
  All model classes are imported inside create_app() so that SQLAlchemy's
  metadata is populated before db.create_all() or Alembic inspects it.
"""

from __future__ import annotations

import logging
import os
import traceback

from flask import Flask, jsonify, request
from marshmallow import ValidationError

from teamup.config import config_by_name, validate_production_config

_REQUIRED_PREFIX = "Missing data for required field"


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str | None = None) -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py. When omitted,
                     FLASK_ENV decides, and unknown or unset values mean
                     "development".
    """
    app = Flask(__name__)

    # ── Configuration ──────────────────────────────────────────────────────
    config_name = config_name or os.getenv("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    _configure_logging(app)

    # ── Extensions ─────────────────────────────────────────────────────────
    from teamup.app.extensions import db
    db.init_app(app)

    # ── Model registration ─────────────────────────────────────────────────
    with app.app_context():
        from teamup.app.models import (  # noqa: F401
            join_request,
            profile,
            project,
            project_member,
            refresh_token,
            user,
        )

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)

    return app


def _configure_logging(app: Flask) -> None:
    """
    Applies LOG_LEVEL to the `teamup` logger tree and the Flask app logger.

    A stream handler is attached only when the root logger has none, so a
    host process (gunicorn, pytest) that already configured logging keeps
    its own handlers.
    """
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    if not logging.getLogger().handlers:
        logging.basicConfig(
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )

    logging.getLogger("teamup").setLevel(level)
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    The url_prefix is set here so individual route files only specify
    the path relative to their resource (e.g. "" and "/<int:id>").
    """
    from teamup.app.routes.auth import auth_bp
    from teamup.app.routes.join_requests import join_requests_bp
    from teamup.app.routes.profiles import profiles_bp
    from teamup.app.routes.projects import projects_bp

    app.register_blueprint(auth_bp,          url_prefix="/api/v1/auth")
    app.register_blueprint(profiles_bp,      url_prefix="/api/v1/profiles")
    app.register_blueprint(projects_bp,      url_prefix="/api/v1/projects")
    app.register_blueprint(join_requests_bp, url_prefix="/api/v1/join-requests")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

    Handlers:
      AppError        → structured JSON error envelope with the correct HTTP status
      ValidationError → first schema error as MISSING_FIELD / INVALID_FIELD (400)
      HTTPException   → Flask's own 404/405 etc. in the same envelope
      Exception       → generic INTERNAL_ERROR (500); traceback logged server-side

    Stack traces never leave the server.
    """
    from werkzeug.exceptions import HTTPException

    from teamup.app.errors import AppError, ErrorCode

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        into the standard error envelope.
        """
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Converts marshmallow ValidationError into the standard error envelope.

        Only the FIRST offending field is reported. A field absent from the
        request body is MISSING_FIELD; anything else is INVALID_FIELD.
        """
        field, message = _first_validation_message(error.messages)

        submitted = error.data if isinstance(error.data, dict) else {}
        if field is not None and field not in submitted:
            code = ErrorCode.MISSING_FIELD
        elif message.startswith(_REQUIRED_PREFIX):
            code = ErrorCode.MISSING_FIELD
        else:
            code = ErrorCode.INVALID_FIELD

        payload = AppError(code, message, 400, field=field).to_dict()
        return jsonify(payload), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        status = error.code or 500
        code = ErrorCode.INTERNAL_ERROR if status >= 500 else error.name.upper().replace(" ", "_")
        return jsonify({
            "error": {
                "code": code,
                "message": error.description,
            }
        }), status

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.

        The full traceback is logged to the application logger.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _first_validation_message(messages) -> tuple[str | None, str]:
    """
    Flattens marshmallow's messages into (field, message) for the first error.

    Nested list errors such as {"looking_for": {0: ["Longer than 100."]}}
    report the outer field name.
    """
    if isinstance(messages, dict):
        for field_name, field_errors in messages.items():
            field = None if field_name == "_schema" else str(field_name)
            _, message = _first_validation_message(field_errors)
            return field, message
        return None, "Invalid input."
    if isinstance(messages, list):
        if not messages:
            return None, "Invalid value."
        _, message = _first_validation_message(messages[0])
        return None, message
    return None, str(messages)


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for the browser frontend.

    Origins listed in CORS_ORIGINS are always allowed. Under DEBUG or
    TESTING any origin is reflected, so a frontend on another local port can
    call the API with Authorization headers.
    """
    allowed = frozenset(app.config.get("CORS_ORIGINS", ()))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all or (origin and origin in allowed):
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response
