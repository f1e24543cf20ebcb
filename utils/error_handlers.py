"""
Standardized error handling utilities for the HR Records Gateway.
Provides consistent error responses across all endpoints.
"""

import logging
import re
from typing import Dict, Any, Optional, Tuple
from flask import jsonify, g
from werkzeug.exceptions import HTTPException

# Setup logging
logger = logging.getLogger(__name__)

# Patterns scrubbed from error text before it leaves the process
_REDACTIONS = (
    (re.compile(r'Bearer [^\s]+'), 'Bearer [REDACTED]'),
    (re.compile(r'\bpat[A-Za-z0-9.]{40,}\b'), '[TOKEN]'),
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
)


class APIError(Exception):
    """
    Custom API exception with standardized error format.

    Attributes:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
    """

    def __init__(self, error_code: str, message: str, status_code: int = 400, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            'error': self.error_code,
            'message': self.message
        }

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ValidationError(APIError):
    """Validation error (400)"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__('validation_error', message, 400, details)


class NotFoundError(APIError):
    """Resource not found error (404)"""
    def __init__(self, message: str = 'The requested resource was not found'):
        super().__init__('not_found', message, 404)


class MethodNotAllowedError(APIError):
    """Method not enabled for the matched route (405)"""
    def __init__(self, method: str, allowed: Optional[list] = None):
        details = {'allowed_methods': sorted(allowed)} if allowed else None
        super().__init__('method_not_allowed', f"Method {method} is not allowed for this resource", 405, details)


class ConfigurationError(APIError):
    """Server-side configuration is incomplete (500)"""
    def __init__(self, message: str = 'Server configuration error'):
        super().__init__('configuration_error', message, 500)


class PaginationError(APIError):
    """Backing source kept paginating past what we are willing to follow (502)"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__('pagination_aborted', message, 502, details)


def redact_message(message: str) -> str:
    """
    Remove credentials and e-mail addresses from an error message.

    Args:
        message: Raw exception text

    Returns:
        Message safe to return to a caller
    """
    for pattern, replacement in _REDACTIONS:
        message = pattern.sub(replacement, message)
    return message


def handle_api_error(error: APIError) -> Tuple[Dict[str, Any], int]:
    """
    Handle custom API errors.

    Args:
        error: APIError instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    if error.status_code >= 500:
        logger.error(f"API Error {error.status_code}: {error.error_code} - {error.message}")
    else:
        logger.warning(f"API Error {error.status_code}: {error.error_code} - {error.message}")
    return error.to_dict(), error.status_code


def handle_http_exception(error: HTTPException) -> Tuple[Dict[str, Any], int]:
    """
    Handle standard HTTP exceptions.

    Args:
        error: HTTPException instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    logger.warning(f"HTTP Exception {error.code}: {error.description}")

    # Map common HTTP errors to our format
    error_map = {
        400: ('bad_request', 'Bad request'),
        404: ('not_found', 'Resource not found'),
        405: ('method_not_allowed', 'Method not allowed'),
        413: ('payload_too_large', 'Payload too large'),
        429: ('rate_limit_exceeded', 'Too many requests. Please try again later.'),
        500: ('internal_error', 'Internal server error'),
        502: ('bad_gateway', 'Bad gateway'),
        503: ('service_unavailable', 'Service unavailable'),
        504: ('gateway_timeout', 'Gateway timeout')
    }

    error_code, default_message = error_map.get(error.code, ('unknown_error', 'Unknown error'))

    return {
        'error': error_code,
        'message': error.description or default_message
    }, error.code


def handle_generic_exception(error: Exception) -> Tuple[Dict[str, Any], int]:
    """
    Handle unexpected exceptions.

    The caller gets the failure's own message text with credentials scrubbed,
    plus the request id for correlating with the logs.

    Args:
        error: Exception instance

    Returns:
        Tuple of (error_dict, status_code)
    """
    message = redact_message(str(error) or error.__class__.__name__)

    # Log the full traceback for debugging
    logger.error(f"Unexpected error: {message}", exc_info=True)

    return {
        'error': 'internal_error',
        'message': message,
        'request_id': g.get('request_id')
    }, 500


def register_error_handlers(app):
    """
    Register error handlers with Flask application.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(APIError)
    def handle_api_error_route(error):
        response_data, status_code = handle_api_error(error)
        return jsonify(response_data), status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception_route(error):
        response_data, status_code = handle_http_exception(error)
        return jsonify(response_data), status_code

    @app.errorhandler(Exception)
    def handle_generic_exception_route(error):
        response_data, status_code = handle_generic_exception(error)
        return jsonify(response_data), status_code
