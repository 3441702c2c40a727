"""
RCB Marketplace - Application Package

This package contains the modular backend structure:
- api/: HTTP route handlers (Flask Blueprints) and Socket.IO chat handlers
- utils/: Shared utility functions

The app factory and core Flask setup remain in app_init.py at the project root.
This package provides the modular route organization.
"""

import logging

logger = logging.getLogger(__name__)

# Import blueprints
from app.api.auth_routes import auth_bp
from app.api.contractors import contractors_bp
from app.api.projects import projects_bp
from app.api.quotes import quotes_bp
from app.api.reviews import reviews_bp
from app.api.estimates import estimates_bp
from app.api.design import design_bp


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.
    Called from the app factory after storage and AI services are attached.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(auth_bp)
    app.register_blueprint(contractors_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(quotes_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(estimates_bp)
    app.register_blueprint(design_bp)
    logger.info("API blueprints registered")


__all__ = [
    'register_blueprints', 'auth_bp', 'contractors_bp', 'projects_bp', 'quotes_bp',
    'reviews_bp', 'estimates_bp', 'design_bp'
]
