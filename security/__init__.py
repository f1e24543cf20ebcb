"""
Security module for the HR Records Gateway.
Handles response hardening headers and CORS preflight short-circuiting.
"""

from flask import Flask, request

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'geolocation=(self), microphone=(), camera=()',
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
}


def init_security(app: Flask) -> Flask:
    """
    Initialize security components for the Flask app.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def answer_preflight():
        """Preflight requests get an empty 204; CORS headers are added on the way out."""
        if request.method == 'OPTIONS':
            return app.response_class(status=204)
        return None

    # Configure security headers
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    return app


__all__ = ['SECURITY_HEADERS', 'init_security']
