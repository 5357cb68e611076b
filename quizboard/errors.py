"""
Error types raised by the quiz service and the centralized JSON responder.

Service code raises one of the QuizError subclasses; nothing in the route
layer catches them. The handlers registered here turn every error into a
``{"success": false, "message": ...}`` body with the matching status code.
"""
import traceback

from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException


class QuizError(Exception):
    """Base error carrying an HTTP status code and a client-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(QuizError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class NotFound(QuizError):
    """Referenced entity is absent."""

    status_code = 404
    default_message = "Resource not found"


class InternalError(QuizError):
    """Store failure."""

    status_code = 500


def error_response(message: str, status_code: int):
    return jsonify({'success': False, 'message': message}), status_code


def register_error_handlers(app, db):
    """Install the JSON error handlers on the Flask app."""

    @app.errorhandler(QuizError)
    def handle_quiz_error(e):
        if e.status_code >= 500:
            db.session.rollback()
            current_app.logger.error(f"{request.method} {request.path} failed: {e.message}")
        else:
            current_app.logger.warning(f"{request.method} {request.path} -> {e.status_code}: {e.message}")
        return error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        """Handle routing errors (404, 405, ...) - always JSON for this API."""
        current_app.logger.warning(f"{e.code} error: {request.method} {request.path}")
        return error_response(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        current_app.logger.error(f"Unhandled error in {request.method} {request.path}: {str(e)}")
        current_app.logger.error(traceback.format_exc())
        return error_response("Internal server error", 500)
