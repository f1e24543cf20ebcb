"""
Third-party integrations for the HR Records Gateway.
Handles IP geolocation and Cloudinary receipt uploads.
"""

from flask import Blueprint, Flask

from config import CloudinarySettings, IPLookupSettings

from .cloudinary_upload import CloudinaryUploader, cloudinary_bp
from .ip_lookup import IPLookupResult, IPLookupService, ip_lookup_bp

# Create combined blueprint for external registration
integrations_bp = Blueprint('integrations', __name__)

# Register sub-blueprints
integrations_bp.register_blueprint(ip_lookup_bp)
integrations_bp.register_blueprint(cloudinary_bp)


def init_integrations(app: Flask, ip_session=None, cloudinary_session=None) -> None:
    """
    Initialize integration services with Flask app.

    Args:
        app: Flask application instance
        ip_session: Optional requests session for the IP lookup service
        cloudinary_session: Optional requests session for Cloudinary uploads
    """
    app.extensions['ip_lookup'] = IPLookupService(
        IPLookupSettings.from_mapping(app.config), session=ip_session
    )
    app.extensions['cloudinary_uploader'] = CloudinaryUploader(
        CloudinarySettings.from_mapping(app.config), session=cloudinary_session
    )


__all__ = ['integrations_bp', 'init_integrations', 'IPLookupResult', 'IPLookupService', 'CloudinaryUploader']
