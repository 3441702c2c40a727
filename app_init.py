"""
Application Initialization Module
Properly initializes Flask app with all infrastructure components
"""
import os
import atexit
import click
from flask import Flask
from flask_socketio import SocketIO
from config import get_config, get_app_env, has_database, get_storage_mode
from logging_config import setup_logging
from ai_service import AIService
from security import setup_security
from health_checks import register_health_checks
from services.storage import create_storage
from services.chat_relay import McpRegistry, ChatRelay
from database.seed import seed_contractors
import logging

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """
    Application factory that creates and configures Flask app with all infrastructure

    Args:
        config_class: Optional config class or object (defaults to FLASK_ENV selection)

    Returns:
        Configured Flask application instance

    Raises:
        StoragePolicyError: If the storage configuration is not allowed
    """
    from app import register_blueprints
    from app.api.chat import register_chat_handlers

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class or get_config())

    setup_logging(app)

    logger.info("=" * 60)
    logger.info("🚀 Initializing RCB Marketplace Application")
    logger.info("=" * 60)
    logger.info(f"Environment: {get_app_env(app.config)}")
    logger.info(f"Debug mode: {app.debug}")

    # Setup security (CORS, headers, error handlers)
    setup_security(app, app.config)

    # Create required directories
    create_required_directories(app)

    # Storage contract (fails fast on a disallowed configuration)
    app.storage = initialize_storage(app)

    # Initialize AI service
    app.ai_service = initialize_ai_service(app)

    # Chat relay and its endpoint registry
    registry = McpRegistry()
    app.chat_relay = ChatRelay(
        registry, app.ai_service, timeout=app.config.get('CHAT_RELAY_TIMEOUT', 30)
    )
    socketio = SocketIO(
        app,
        cors_allowed_origins=app.config.get('SOCKETIO_CORS_ORIGINS', '*'),
        async_mode='threading',
        logger=False,
        engineio_logger=False
    )
    register_chat_handlers(socketio, app.chat_relay)

    # Register routes
    register_blueprints(app)
    register_health_checks(app)
    register_cli_commands(app)

    if not app.testing:
        atexit.register(shutdown_app, app)

    logger.info("✅ Application initialization complete")
    logger.info("=" * 60)

    return app


def create_required_directories(app):
    """
    Create all required application directories

    Args:
        app: Flask application instance
    """
    directories = [app.config.get('LOG_DIR', 'logs')]
    if get_storage_mode(app.config) == 'document':
        directories.append(app.config['DOCUMENT_STORE_FOLDER'])

    for directory in directories:
        try:
            os.makedirs(directory, exist_ok=True)
            logger.debug(f"Directory ensured: {directory}")
        except OSError as e:
            logger.error(f"Failed to create directory {directory}: {e}")

    logger.info(f"✅ Created {len(directories)} required directories")


def initialize_storage(app):
    """
    Create the storage adapter and seed the contractor directory

    Args:
        app: Flask application instance

    Returns:
        Storage implementation
    """
    logger.info(f"🗄️  Database configured: {has_database(app.config)}")
    storage = create_storage(app.config)
    logger.info(f"💾 Storage mode: {storage.backend_name}")

    if app.config.get('SEED_CONTRACTORS'):
        seed_contractors(storage)

    return storage


def initialize_ai_service(app):
    """
    Initialize centralized AI service manager

    Args:
        app: Flask application instance

    Returns:
        AIService instance
    """
    ai_service = AIService(app.config)

    # Log which services are available
    available_services = []
    if ai_service.is_available('openai'):
        available_services.append('Azure OpenAI' if ai_service.provider == 'azure' else 'OpenAI')
    if ai_service.is_available('claude'):
        available_services.append('Claude')

    if available_services:
        logger.info(f"✅ AI Services initialized: {', '.join(available_services)}")
    else:
        logger.warning("⚠️  No AI services configured - check API keys")

    return ai_service


def register_cli_commands(app):
    """Register flask CLI commands"""

    @app.cli.command('seed')
    def seed_command():
        """Create the default contractor directory if it is empty."""
        created = seed_contractors(app.storage)
        click.echo(f"Seeded {created} contractors" if created else "Contractors already present")


def shutdown_app(app):
    """
    Release process-wide resources: chat registry and storage connections

    Args:
        app: Flask application instance
    """
    relay = getattr(app, 'chat_relay', None)
    if relay is not None:
        relay.registry.clear()
    storage = getattr(app, 'storage', None)
    if storage is not None:
        storage.close()
    logger.info("Application resources released")
