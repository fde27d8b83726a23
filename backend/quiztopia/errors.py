"""Error taxonomy and the Flask handlers that render it.

Handlers raise one of the ApiError subclasses; only the class-level public
message (plus validation errors) ever reaches the caller.
"""

from flask import current_app
from werkzeug.exceptions import HTTPException

from quiztopia.responses import envelope


class ApiError(Exception):
    status_code = 500
    message = 'Internal server error occurred'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.errors = list(errors or [])


class ValidationFailed(ApiError):
    status_code = 400
    message = 'Validation failed'


class Unauthorized(ApiError):
    status_code = 401
    message = 'Invalid or expired token'


class Forbidden(ApiError):
    status_code = 403
    message = 'Access denied'


class NotFound(ApiError):
    status_code = 404
    message = 'Resource not found'


class Conflict(ApiError):
    status_code = 409
    message = 'Conflict'


class Internal(ApiError):
    status_code = 500
    message = 'Internal server error occurred'


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        return envelope(exc.status_code, exc.message, errors=exc.errors)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return envelope(exc.code or 500, exc.description or exc.name)

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        current_app.logger.exception(f"[unhandled] {type(exc).__name__}")
        return envelope(Internal.status_code, Internal.message)
