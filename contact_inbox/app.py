"""Flask application — contact endpoint, health check, optional static site."""

import logging
import os

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from contact_inbox.config import Config, load_config
from contact_inbox.errors import PersistenceError, ValidationError
from contact_inbox.handler import SubmissionHandler
from contact_inbox.models import RequestContext

logger = logging.getLogger(__name__)


def create_app(config: Config = None, handler: SubmissionHandler = None) -> Flask:
    """Flask application factory."""
    if config is None:
        config = load_config()
    if handler is None:
        handler = SubmissionHandler.from_config(config)

    site_dir = os.path.abspath(config.site_dir) if config.site_dir else None
    app = Flask(__name__, static_folder=site_dir, static_url_path="" if site_dir else None)
    app.config["MAX_CONTENT_LENGTH"] = config.max_body_bytes
    app.config["components"] = {"config": config, "handler": handler}

    origins = _split_origins(config.cors_origins)
    CORS(app, resources={r"/api/*": {"origins": origins}}, send_wildcard=origins == "*")

    # --- Error handlers ---

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        logger.info("Rejected submission: %s", error)
        body = {"ok": False, "error": str(error)}
        if error.missing:
            body["missing"] = list(error.missing)
        if error.errors:
            body["errors"] = list(error.errors)
        return jsonify(body), 400

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(error: PersistenceError):
        logger.error("Submission not saved: %s", error, exc_info=error)
        return jsonify({"ok": False, "accepted": False, "error": "Server error"}), 500

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({"ok": False, "error": "Request body too large"}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error while serving %s", request.path)
        return jsonify({"ok": False, "error": "Server error"}), 500

    # --- Routes ---

    @app.route("/api/health")
    def health():
        return jsonify({
            "ok": True,
            "status": "healthy",
            "relay": "enabled" if handler.relay_enabled else "disabled",
        })

    @app.route("/api/contact", methods=["POST"])
    def contact():
        outcome = handler.submit(_request_payload(), _request_context())
        return jsonify(outcome.to_dict())

    if site_dir:
        @app.route("/")
        def index():
            return send_from_directory(site_dir, "index.html")

    return app


def _request_payload():
    if request.is_json:
        return request.get_json(silent=True)
    if request.form:
        return request.form.to_dict()
    return request.get_json(silent=True, force=True) or {}


def _request_context() -> RequestContext:
    forwarded = request.headers.get("X-Forwarded-For", "")
    source = forwarded.split(",")[0].strip() if forwarded else ""
    return RequestContext(
        user_agent=request.headers.get("User-Agent", ""),
        source_address=source or request.remote_addr or "",
    )


def _split_origins(value: str):
    origins = [item.strip() for item in value.split(",") if item.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins
