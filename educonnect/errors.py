"""Error taxonomy shared by the services and the JSON blueprints.

Services raise these; ``register_error_handlers`` maps them to status-coded
JSON bodies. Nothing here is retried.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class EduConnectError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors

    def to_dict(self):
        body = {"error": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class Unauthorized(EduConnectError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(EduConnectError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(EduConnectError):
    status_code = 404
    default_message = "Not found"


class ValidationError(EduConnectError):
    status_code = 400
    default_message = "Invalid data"


class Conflict(EduConnectError):
    status_code = 409
    default_message = "Conflict"


class DeadlinePassed(EduConnectError):
    status_code = 400
    default_message = "Assignment is past due date"


def register_error_handlers(app):
    from . import db

    @app.errorhandler(EduConnectError)
    def _domain_error(err):
        if err.status_code >= 500:
            app.logger.error("Domain error: %s", err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err):
        return jsonify({"error": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def _unexpected(err):
        # never leak internals to the caller
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", err)
        return jsonify({"error": "Internal server error"}), 500


def register_jwt_callbacks(jwt):
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"error": "Unauthorized", "detail": reason}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"error": "Invalid token", "detail": reason}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"error": "Token expired"}), 401
