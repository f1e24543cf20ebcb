"""
Configuration module for the HR Records Gateway.
Handles environment-specific settings and the typed settings passed into the gateway.
"""

import os
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Base configuration class."""

    # Flask Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Airtable Configuration (mandatory for every /api data route)
    AIRTABLE_API_KEY = os.environ.get('AIRTABLE_API_KEY')
    AIRTABLE_BASE_ID = os.environ.get('AIRTABLE_BASE_ID')
    AIRTABLE_API_URL = os.environ.get('AIRTABLE_API_URL', 'https://api.airtable.com/v0')
    AIRTABLE_PAGE_SIZE = int(os.environ.get('AIRTABLE_PAGE_SIZE', 100))  # Airtable maximum
    AIRTABLE_MAX_PAGES = int(os.environ.get('AIRTABLE_MAX_PAGES', 1000))
    AIRTABLE_TIMEOUT = int(os.environ.get('AIRTABLE_TIMEOUT', 30))

    # Response Cache Configuration
    RESPONSE_CACHE_ENABLED = _env_flag('RESPONSE_CACHE_ENABLED')

    # Cloudinary Configuration
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME') or 'dow5ohgj9'
    CLOUDINARY_UPLOAD_PRESET = os.environ.get('CLOUDINARY_UPLOAD_PRESET') or 'glampack_hr_uploads'
    CLOUDINARY_FOLDER = os.environ.get('CLOUDINARY_FOLDER', 'glampack-hr/medical-receipts')
    CLOUDINARY_API_URL = os.environ.get('CLOUDINARY_API_URL', 'https://api.cloudinary.com/v1_1')
    CLOUDINARY_TIMEOUT = int(os.environ.get('CLOUDINARY_TIMEOUT', 60))

    # IP Lookup Configuration
    IP_LOOKUP_URL = os.environ.get('IP_LOOKUP_URL', 'http://ip-api.com/json')
    IP_LOOKUP_TIMEOUT = int(os.environ.get('IP_LOOKUP_TIMEOUT', 5))

    # CORS Configuration
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'Cache-Control', 'Pragma']
    CORS_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']

    # Rate Limiting Configuration
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'true')
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '1000 per hour')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI') or os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_HEADERS_ENABLED = True

    # Application Configuration
    APP_NAME = os.environ.get('APP_NAME', 'HR Records Gateway')
    APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')

    # File Upload Configuration
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16777216))  # 16MB

    # Monitoring Configuration
    SENTRY_DSN = os.environ.get('SENTRY_DSN')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    TESTING = False

    # More verbose logging in development
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True

    # Never reach the real services from tests
    AIRTABLE_API_KEY = 'test-airtable-key'
    AIRTABLE_BASE_ID = 'appTestBase'
    RESPONSE_CACHE_ENABLED = False
    SENTRY_DSN = None

    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    TESTING = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING')


class StagingConfig(ProductionConfig):
    """Staging configuration (like production but with debug info)."""

    LOG_LEVEL = 'DEBUG'


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'staging': StagingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(environment: str = None) -> Config:
    """
    Get configuration class based on environment.

    Args:
        environment: Environment name

    Returns:
        Configuration class
    """
    if environment is None:
        environment = os.environ.get('ENVIRONMENT', 'development')

    return config_mapping.get(environment, DevelopmentConfig)


def load_config(app, config: Dict[str, Any] = None) -> None:
    """
    Load configuration into Flask app.

    Args:
        app: Flask application instance
        config: Additional configuration overrides
    """
    environment = (config or {}).get('ENVIRONMENT') or os.environ.get('ENVIRONMENT', 'development')
    app.config.from_object(get_config(environment))

    # Apply any additional configuration
    if config:
        app.config.update(config)


@dataclass(frozen=True)
class GatewaySettings:
    """Airtable proxy settings, fixed when the gateway is constructed."""

    api_key: Optional[str]
    base_id: Optional[str]
    api_url: str = 'https://api.airtable.com/v0'
    page_size: int = 100
    max_pages: int = 1000
    timeout: int = 30
    cache_enabled: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.base_id)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'GatewaySettings':
        return cls(
            api_key=config.get('AIRTABLE_API_KEY'),
            base_id=config.get('AIRTABLE_BASE_ID'),
            api_url=config.get('AIRTABLE_API_URL', 'https://api.airtable.com/v0').rstrip('/'),
            page_size=int(config.get('AIRTABLE_PAGE_SIZE', 100)),
            max_pages=int(config.get('AIRTABLE_MAX_PAGES', 1000)),
            timeout=int(config.get('AIRTABLE_TIMEOUT', 30)),
            cache_enabled=bool(config.get('RESPONSE_CACHE_ENABLED', False)),
        )


@dataclass(frozen=True)
class CloudinarySettings:
    """Non-secret Cloudinary upload settings."""

    cloud_name: str
    upload_preset: str
    folder: str
    api_url: str
    timeout: int = 60

    @property
    def upload_url(self) -> str:
        return f"{self.api_url}/{self.cloud_name}/auto/upload"

    def to_public_dict(self) -> Dict[str, str]:
        """Shape returned to the browser; contains nothing secret."""
        return {
            'cloudName': self.cloud_name,
            'uploadPreset': self.upload_preset,
            'folder': self.folder,
            'apiUrl': self.api_url
        }

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'CloudinarySettings':
        return cls(
            cloud_name=config.get('CLOUDINARY_CLOUD_NAME') or 'dow5ohgj9',
            upload_preset=config.get('CLOUDINARY_UPLOAD_PRESET') or 'glampack_hr_uploads',
            folder=config.get('CLOUDINARY_FOLDER', 'glampack-hr/medical-receipts'),
            api_url=config.get('CLOUDINARY_API_URL', 'https://api.cloudinary.com/v1_1').rstrip('/'),
            timeout=int(config.get('CLOUDINARY_TIMEOUT', 60)),
        )


@dataclass(frozen=True)
class IPLookupSettings:
    base_url: str = 'http://ip-api.com/json'
    timeout: int = 5

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> 'IPLookupSettings':
        return cls(
            base_url=config.get('IP_LOOKUP_URL', 'http://ip-api.com/json').rstrip('/'),
            timeout=int(config.get('IP_LOOKUP_TIMEOUT', 5)),
        )
