"""Error taxonomy for the arcade ledger.

Services raise these; the Flask handlers registered by
`register_error_handlers` turn them into ``{"error", "code"}`` JSON bodies
with the matching HTTP status, so every failure reaches the client with a
short readable reason.
"""

import re
from typing import Any, Dict, Optional

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ArcadeError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def code(self) -> str:
        return re.sub(r'(?<!^)(?=[A-Z])', '_', type(self).__name__).lower()

    def to_dict(self) -> Dict[str, Any]:
        payload = {'error': self.message, 'code': self.code}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(ArcadeError):
    """Missing or malformed input."""
    status_code = 400


class InvalidAmount(ValidationError):
    status_code = 400


class Conflict(ArcadeError):
    """Username or email already taken."""
    status_code = 409


class Unauthorized(ArcadeError):
    status_code = 401


class Forbidden(ArcadeError):
    status_code = 403


class NotFound(ArcadeError):
    status_code = 404


class InsufficientFunds(ArcadeError):
    """A balance would go below zero."""
    status_code = 400


class Internal(ArcadeError):
    status_code = 500
    retryable = True


def register_error_handlers(app) -> None:
    from arcade import db

    @app.errorhandler(ArcadeError)
    def handle_arcade_error(exc: ArcadeError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({'error': exc.description, 'code': (exc.name or 'error').lower().replace(' ', '_')}), exc.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(exc: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception(f"[db-error] {exc.__class__.__name__}")
        err = Internal('Internal server error')
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        app.logger.exception(f"[unhandled] {exc.__class__.__name__}")
        err = Internal('Internal server error')
        return jsonify(err.to_dict()), err.status_code
