"""
Gateway module for the HR Records Gateway.
Handles request proxying and pagination against the Airtable backing source.
"""

import logging

from flask import Blueprint, Flask, request

from config import GatewaySettings
from utils.error_handlers import ConfigurationError

from .records_proxy import records_proxy_bp
from .service import AirtableGateway

logger = logging.getLogger(__name__)

# Create combined blueprint for external registration
gateway_bp = Blueprint('gateway', __name__)

# Register sub-blueprints
gateway_bp.register_blueprint(records_proxy_bp)

# Paths under /api that never touch Airtable and skip the credential check
CREDENTIAL_EXEMPT_PATHS = frozenset(('/api/iplookup',))


def init_gateway(app: Flask, client=None) -> AirtableGateway:
    """
    Build the gateway from app configuration and install the credential guard.

    Args:
        app: Flask application instance
        client: Optional backing client replacing the default requests-based one

    Returns:
        The gateway stored under ``app.extensions['airtable_gateway']``
    """
    settings = GatewaySettings.from_mapping(app.config)
    gateway = AirtableGateway(settings, client=client)
    app.extensions['airtable_gateway'] = gateway

    if not settings.is_configured:
        logger.warning("AIRTABLE_API_KEY or AIRTABLE_BASE_ID not configured; /api data routes will fail")

    @app.before_request
    def require_backing_credentials():
        """Refuse /api calls before routing when Airtable credentials are missing."""
        if request.method == 'OPTIONS':
            return None
        path = request.path.rstrip('/')
        if not (path == '/api' or path.startswith('/api/')) or path in CREDENTIAL_EXEMPT_PATHS:
            return None
        if not gateway.settings.is_configured:
            raise ConfigurationError()
        return None

    return gateway


__all__ = ['gateway_bp', 'init_gateway', 'AirtableGateway']
