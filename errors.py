"""
API error types and the Flask handlers that render them as JSON.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base error carrying an HTTP status code"""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(APIError):
    status_code = 400


class AmbiguousRoom(ValidationError):
    pass


class AuthError(APIError):
    status_code = 401


class AccessDenied(APIError):
    status_code = 403


class InvalidState(AccessDenied):
    pass


class Unassigned(AccessDenied):
    pass


class NoRoom(AccessDenied):
    pass


class StayExpired(AccessDenied):
    pass


class NotFound(APIError):
    status_code = 404


class Conflict(APIError):
    status_code = 409


class DatabaseError(APIError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error(f"[API] {error.message}")
        return jsonify({'success': False, 'message': error.message}), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error(f"[DB] Query failed: {error}")
        return jsonify({'success': False, 'message': 'Database error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception(f"[API] Unexpected error: {error}")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500
