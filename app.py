#!/usr/bin/env python3
"""
HR Records Gateway
Flask application that proxies the HR front end to Airtable, Cloudinary and ip-api.com,
keeping every third-party credential on the server.
"""

import os
import logging
from typing import Dict, Any
from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config import load_config
from gateway import gateway_bp, init_gateway
from integrations import integrations_bp, init_integrations
from security import init_security
from utils.error_handlers import register_error_handlers
from utils.monitoring import init_monitoring

logger = logging.getLogger(__name__)


def configure_logging(app: Flask) -> None:
    """Configure root logging once, from the app's LOG_LEVEL and LOG_FILE."""
    handlers = [logging.StreamHandler()]
    if app.config.get('LOG_FILE'):
        handlers.append(logging.FileHandler(app.config['LOG_FILE']))

    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def create_app(config: Dict[str, Any] = None, airtable_client=None, ip_session=None,
               cloudinary_session=None) -> Flask:
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config: Optional configuration overrides
        airtable_client: Optional backing client used instead of the requests-based one
        ip_session: Optional requests session for the IP lookup service
        cloudinary_session: Optional requests session for Cloudinary uploads

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    load_config(app, config)
    configure_logging(app)

    # Initialize monitoring and error tracking
    init_monitoring(app)
    register_error_handlers(app)

    # Initialize extensions
    init_extensions(app)

    # Gateway services
    init_gateway(app, client=airtable_client)
    init_integrations(app, ip_session=ip_session, cloudinary_session=cloudinary_session)

    # Register blueprints
    register_blueprints(app)

    # Add request logging
    setup_request_logging(app)

    logger.info("HR Records Gateway initialized")
    return app


def init_extensions(app: Flask) -> None:
    """Initialize Flask extensions."""
    # Permissive CORS for the browser front end
    CORS(
        app,
        origins=app.config['CORS_ORIGINS'],
        methods=app.config['CORS_METHODS'],
        allow_headers=app.config['CORS_ALLOW_HEADERS'],
        expose_headers=['X-Request-ID', 'X-Cache'],
        send_wildcard=True
    )

    # Preflight short-circuit and hardening headers
    init_security(app)

    # Rate limiting
    app.limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[app.config['RATELIMIT_DEFAULT']],
        storage_uri=app.config['RATELIMIT_STORAGE_URI']
    )


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""
    app.register_blueprint(integrations_bp)
    app.register_blueprint(gateway_bp, url_prefix='/api')


def setup_request_logging(app: Flask) -> None:
    """Setup request and response logging."""

    @app.before_request
    def log_request_info():
        """Log incoming requests (no bodies, no credentials)."""
        if request.path in ('/health', '/metrics'):
            return
        logger.info(f"Request: {request.method} {request.path} from {get_remote_address()}")

    @app.after_request
    def log_response_info(response):
        """Log response information."""
        if request.path in ('/health', '/metrics'):
            return response
        logger.info(f"Response: {response.status_code} for {request.method} {request.path}")
        return response


if __name__ == '__main__':
    app = create_app()

    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('DEBUG', 'false').lower() == 'true'

    logger.info(f"Starting HR Records Gateway on port {port}")
    logger.info(f"Environment: {app.config.get('ENVIRONMENT')}")
    logger.info(f"Debug mode: {debug}")

    app.run(host='0.0.0.0', port=port, debug=debug)
