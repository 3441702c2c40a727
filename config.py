"""
Centralized Configuration for the RCB Marketplace Application
Manages environment-specific settings, secrets, and service configurations.

STORAGE POLICY:
- Production: DATABASE_URL is REQUIRED unless STORAGE_BACKEND=document is set explicitly.
- Development: Database preferred, document store fallback allowed if no DATABASE_URL.
"""
import os
from datetime import timedelta


class StoragePolicyError(RuntimeError):
    """Raised when the configured storage backend is not allowed in this environment"""
    pass


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # JSON API only

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With']

    # Storage Settings
    DATABASE_URL = os.environ.get('DATABASE_URL')
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND')  # sql | document
    DOCUMENT_STORE_FOLDER = os.environ.get('DOCUMENT_STORE_FOLDER', 'data')
    SQLALCHEMY_ECHO = False
    SEED_CONTRACTORS = os.environ.get('SEED_CONTRACTORS', 'true').lower() == 'true'

    # AI Service Settings
    AI_PROVIDER = os.environ.get('AI_PROVIDER', 'openai')  # openai | azure | anthropic
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    AZURE_OPENAI_API_KEY = os.environ.get('AZURE_OPENAI_API_KEY')
    AZURE_OPENAI_ENDPOINT = os.environ.get('AZURE_OPENAI_ENDPOINT')
    AZURE_OPENAI_DEPLOYMENT_NAME = os.environ.get('AZURE_OPENAI_DEPLOYMENT_NAME')
    AZURE_OPENAI_API_VERSION = os.environ.get('AZURE_OPENAI_API_VERSION', '2023-12-01-preview')
    ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY')

    # AI Model Configuration
    AI_MODELS = {
        'openai': {
            'model': os.environ.get('OPENAI_MODEL', 'gpt-4o'),
            'image_model': os.environ.get('OPENAI_IMAGE_MODEL', 'dall-e-3'),
            'max_tokens': 2000,
            'temperature': 0.7,
        },
        'claude': {
            'model': 'claude-sonnet-4-20250514',
            'max_tokens': 2048,
            'temperature': 0.7,
        },
    }

    # AI Retry Configuration
    AI_RETRY_ATTEMPTS = int(os.environ.get('AI_RETRY_ATTEMPTS', '1'))
    AI_RETRY_DELAY = int(os.environ.get('AI_RETRY_DELAY', '2'))  # seconds
    AI_TIMEOUT = int(os.environ.get('AI_TIMEOUT', '120'))  # seconds

    # Chat Relay
    CHAT_RELAY_TIMEOUT = int(os.environ.get('CHAT_RELAY_TIMEOUT', '30'))  # seconds
    SOCKETIO_CORS_ORIGINS = os.environ.get('SOCKETIO_CORS_ORIGINS', '*')

    # Maps
    MAPS_API_KEY = os.environ.get('MAPS_API_KEY')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Session Configuration
    SESSION_PERMANENT = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    # Allow all CORS in development
    CORS_ORIGINS = ['*']


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    # Strict CORS in production
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://rcb-marketplace.onrender.com').split(',')
    # Force HTTPS
    PREFERRED_URL_SCHEME = 'https'
    # Enable all security features
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    SECRET_KEY = 'rcb-testing-session-key-a7f3c9e1b4d8f2a6'
    DATABASE_URL = None
    STORAGE_BACKEND = 'document'
    SEED_CONTRACTORS = False
    AI_RETRY_ATTEMPTS = 1
    AI_RETRY_DELAY = 0
    LOG_FILE = 'test.log'


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)


# ============================================================================
# STORAGE POLICY HELPERS
# ============================================================================

def get_app_env(config=None):
    """Return the current environment name"""
    if config is not None and config.get('TESTING'):
        return 'testing'
    return os.environ.get('FLASK_ENV', 'development')


def is_production(config=None):
    """Check whether we are running in production"""
    return get_app_env(config) == 'production'


def has_database(config=None):
    """Check if a DATABASE_URL is configured"""
    if config is not None:
        return bool(config.get('DATABASE_URL'))
    return bool(os.environ.get('DATABASE_URL'))


def get_storage_mode(config):
    """
    Resolve which persistence adapter should back the storage contract

    Args:
        config: Flask config mapping

    Returns:
        'sql' or 'document'
    """
    backend = (config.get('STORAGE_BACKEND') or '').lower()
    if backend in ('sql', 'document'):
        return backend
    if backend:
        raise StoragePolicyError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'sql' or 'document')")
    return 'sql' if has_database(config) else 'document'


def validate_storage_config(config):
    """
    Validate storage configuration at startup.

    Raises:
        StoragePolicyError: If production falls back to the document store implicitly,
            or the SQL backend is requested without a DATABASE_URL
    """
    mode = get_storage_mode(config)

    if mode == 'sql' and not has_database(config):
        raise StoragePolicyError("STORAGE_BACKEND=sql requires DATABASE_URL to be configured.")

    explicit_document = (config.get('STORAGE_BACKEND') or '').lower() == 'document'
    if is_production(config) and mode == 'document' and not explicit_document:
        raise StoragePolicyError(
            "Document store fallback is disabled in production. "
            "Configure DATABASE_URL or set STORAGE_BACKEND=document explicitly."
        )

    return mode
