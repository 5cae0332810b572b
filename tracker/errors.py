"""Error taxonomy shared by services and routes, plus JSON error handlers."""
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException


class TrackerError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, errors=None, status_code=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        body = {'success': False, 'message': self.message}
        if self.errors:
            body['errors'] = list(self.errors)
        return body


class ValidationError(TrackerError):
    status_code = 400
    message = 'Validation error'


class NotFound(TrackerError):
    status_code = 404
    message = 'Not found'


class ConfigurationMissing(TrackerError):
    status_code = 400
    message = 'Email configuration not found or not configured'


class AuthenticationError(TrackerError):
    status_code = 401
    message = 'Access token required'


class TransportError(TrackerError):
    """
    SMTP level failure (auth, connection, TLS mismatch, timeout).
    Converted to a Failed EmailLog row by the dispatcher.
    """
    status_code = 502
    message = 'Email delivery failed'

    def __init__(self, message=None, suggestion=None):
        super().__init__(message)
        self.suggestion = suggestion

    def __str__(self):
        if self.suggestion:
            return f"{self.message} Suggestion: {self.suggestion}"
        return self.message


def register_error_handlers(app):

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(Exception)
    def handle_exception(e):
        # pass through HTTP errors
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'message': e.description}), e.code

        current_app.logger.exception(f"Unhandled exception: {e}")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500
