"""Flask application factory for the gateway."""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, make_response, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound, RequestEntityTooLarge

from drivegateway.config import GatewaySettings
from drivegateway.controller import DriveGateway
from drivegateway.errors import DriveGatewayError, ValidationError
from drivegateway.provisioning import CourseFolderProvisioner
from drivegateway.util.time import now_utc, to_rfc3339

from .routes import EXTENSION_KEY, GatewayContext, drive_bp

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def create_app(
    settings: Optional[GatewaySettings] = None,
    *,
    gateway: Optional[DriveGateway] = None,
) -> Flask:
    """
    Build the gateway app.

    Args:
        settings: defaults to GatewaySettings.from_env().
        gateway: pre-built gateway (tests inject one wired to fakes).
    """
    settings = settings or GatewaySettings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes
    app.json.ensure_ascii = False

    if gateway is None:
        gateway = DriveGateway(
            settings.credential,
            shared_drive_id=settings.shared_drive_id,
            timeout=settings.timeout_sec,
            cache_tokens=settings.cache_tokens,
        )
    provisioner = CourseFolderProvisioner(
        gateway,
        root_folder_id=settings.root_folder_id,
        courses_folder_name=settings.courses_folder_name,
        projects_folder_name=settings.projects_folder_name,
    )
    app.extensions[EXTENSION_KEY] = GatewayContext(
        settings=settings,
        gateway=gateway,
        provisioner=provisioner,
    )

    app.register_blueprint(drive_bp)
    _register_hooks(app)
    _register_error_handlers(app)

    if not settings.credential.has_private_key:
        logger.warning("No service account private key configured; Drive calls will fail")
    logger.info("drivegateway initialised (shared drive: %s)", settings.shared_drive_id or "none")
    return app


def _error_response(message: str, status: int, **extra):
    body = {"error": message, "timestamp": to_rfc3339(now_utc())}
    body.update(extra)
    return jsonify(body), status


def _register_hooks(app: Flask) -> None:
    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return make_response("", 200)
        return None

    @app.after_request
    def _cors(response):
        for key, value in CORS_HEADERS.items():
            response.headers[key] = value
        return response


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(exc: ValidationError):
        return _error_response(str(exc), 400)

    @app.errorhandler(DriveGatewayError)
    def _gateway_error(exc: DriveGatewayError):
        logger.error("%s: %s", type(exc).__name__, exc)
        return _error_response(str(exc), 500)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(exc: RequestEntityTooLarge):
        limit = app.config.get("MAX_CONTENT_LENGTH")
        return _error_response(f"File too large for simple upload (limit {limit} bytes)", 400)

    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def _not_found(exc: HTTPException):
        return _error_response("Endpoint not found", 404, path=request.path, method=request.method)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        status = 500 if (exc.code or 500) >= 500 else 400
        return _error_response(exc.description or exc.name, status)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return _error_response(str(exc) or "Internal server error", 500)
