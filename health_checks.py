"""
Liveness and Status Endpoints
Provides liveness and detailed status endpoints for deployment health checks
"""
import os
import sys
import time
import psutil
from datetime import datetime
from typing import Dict, Any
from flask import Blueprint, jsonify, current_app
import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = 'rcb-marketplace'
SERVICE_VERSION = '1.0.0'

# Unprefixed so load balancers can probe /health directly
health_bp = Blueprint('health', __name__)

# Process start, for uptime reporting
START_TIME = time.time()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic process metrics

    Returns:
        CPU, memory and thread counts for this process, or {} if psutil fails
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': round(process.memory_info().rss / 1024 / 1024, 2),
            'memory_percent': round(process.memory_percent(), 2),
            'threads': process.num_threads(),
        }
    except psutil.Error as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Time since this process imported the module

    Returns:
        Seconds, hours and ISO start time
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME).isoformat()
    }


def check_ai_services(app) -> Dict[str, Any]:
    """
    Report which AI providers are configured (never the keys themselves)

    Args:
        app: Flask application instance
    """
    ai_service = getattr(app, 'ai_service', None)
    if ai_service is None:
        return {'provider': app.config.get('AI_PROVIDER'), 'available': False}
    return ai_service.status()


def check_storage(app) -> Dict[str, Any]:
    """
    Ask the storage adapter for its health

    Args:
        app: Flask application instance
    """
    storage = getattr(app, 'storage', None)
    if storage is None:
        return {'status': 'unhealthy', 'error': 'Storage not initialized'}
    return storage.check_health()


def check_chat(app) -> Dict[str, Any]:
    relay = getattr(app, 'chat_relay', None)
    if relay is None:
        return {'enabled': False}
    return {
        'enabled': True,
        'connections': relay.session_count(),
        'registered_servers': len(relay.registry),
    }


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Liveness probe
    Always 200 while the process can serve requests

    Used by: platform health checks, uptime monitors
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': SERVICE_NAME
    }), 200


@health_bp.route('/health/detailed', methods=['GET'])
def detailed_health_check():
    """
    Detailed status endpoint
    Returns 200 when storage is healthy, 503 otherwise

    Used by: Monitoring dashboards, deployment readiness checks
    """
    storage = check_storage(current_app)
    healthy = storage.get('status') == 'healthy'

    response = {
        'status': 'healthy' if healthy else 'degraded',
        'timestamp': datetime.utcnow().isoformat(),
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'environment': os.environ.get('FLASK_ENV', 'production'),
        'uptime': get_uptime(),
        'system': get_system_metrics(),
        'checks': {
            'storage': storage,
            'ai_services': check_ai_services(current_app),
            'chat': check_chat(current_app),
        },
        'python_version': sys.version.split()[0]
    }

    return jsonify(response), 200 if healthy else 503


def register_health_checks(app):
    """
    Mount /health and /health/detailed on the app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp)
    logger.info("Health check endpoints registered")
    logger.info("Available endpoints: /health, /health/detailed")
