"""
Security Middleware for the JSON API
Session secret handling, CORS, response headers, JSON error bodies and request logging.
"""
import os
import time
import secrets
from typing import Dict, Any, List
from flask import Flask, request, jsonify, Response, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging

from ai_service import AIServiceError, AIRateLimitError, AIServiceUnavailable
from services.storage import StorageError
from validators import ValidationError

logger = logging.getLogger(__name__)

QUIET_PATHS = ('/health', '/health/detailed')

# Applied to every response; nothing is rendered from this origin
SECURITY_HEADERS = {
    'X-Frame-Options': 'SAMEORIGIN',
    'X-Content-Type-Options': 'nosniff',
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'self'",
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    # Location stays allowed for the client-side contractor map
    'Permissions-Policy': 'microphone=(), camera=()',
}
HSTS_HEADER = 'max-age=31536000; includeSubDomains'


class SecurityConfig:
    """Session secret policy"""

    MIN_KEY_LENGTH = 32
    WEAK_KEY_MARKERS = ('dev', 'secret', 'password', '12345', 'changeme')

    @classmethod
    def validate_secret_key(cls, secret_key: str) -> bool:
        """
        Check that a session signing key is long and not a placeholder

        Args:
            secret_key: Candidate SECRET_KEY

        Returns:
            True if the key can sign session cookies
        """
        if not secret_key:
            return False
        if len(secret_key) < cls.MIN_KEY_LENGTH:
            logger.warning(f"SECRET_KEY shorter than {cls.MIN_KEY_LENGTH} characters")
            return False
        lowered = secret_key.lower()
        if any(marker in lowered for marker in cls.WEAK_KEY_MARKERS):
            logger.warning("SECRET_KEY looks like a placeholder value")
            return False
        return True

    @classmethod
    def ensure_secret_key(cls, config: Dict[str, Any]) -> str:
        """
        Return the configured key, or a random one when it is missing or weak.
        A random key logs everyone out on restart.
        """
        secret_key = config.get('SECRET_KEY')
        if cls.validate_secret_key(secret_key):
            return secret_key

        if os.environ.get('FLASK_ENV') == 'production':
            logger.error("No usable SECRET_KEY in production; sessions will not survive restarts")
        secret_key = secrets.token_hex(cls.MIN_KEY_LENGTH)
        logger.warning(f"Using a generated session key (length: {len(secret_key)})")
        return secret_key


def setup_security_headers(app: Flask):
    """
    Attach the standard security headers to each response

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_security_headers(response: Response) -> Response:
        response.headers.update(SECURITY_HEADERS)
        if not app.debug:
            response.headers['Strict-Transport-Security'] = HSTS_HEADER
        return response

    logger.info("Security headers configured")


def setup_cors(app: Flask, config: Dict[str, Any]):
    """
    Allow the marketplace front end to call the API with its session cookie

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    origins = config.get('CORS_ORIGINS', ['*'])

    if not app.debug and '*' in origins:
        logger.warning("⚠️  Wildcard CORS outside debug mode. Set CORS_ORIGINS to the front end URL.")

    CORS(
        app,
        origins=origins,
        methods=config.get('CORS_METHODS', ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS']),
        allow_headers=config.get('CORS_ALLOW_HEADERS', ['Content-Type']),
        supports_credentials=True,
        max_age=3600
    )

    logger.info(f"CORS configured: origins={origins}")


def sanitize_error_response(error: Exception, include_details: bool = False) -> Dict[str, Any]:
    """
    Generic 500 body; the exception text is only added in debug mode

    Args:
        error: Exception object
        include_details: Whether to expose the exception (debug only)
    """
    body = {
        'error': 'Internal Server Error',
        'message': 'An error occurred while processing your request'
    }
    if include_details:
        body['details'] = str(error)
        body['type'] = type(error).__name__
    return body


def error_response(title: str, message: str, status: int):
    """Uniform JSON error body"""
    return jsonify({'error': title, 'message': message}), status


# Default messages per status; a description passed to the exception wins
HTTP_ERROR_MESSAGES = {
    400: ('Bad Request', 'The request could not be understood or was missing required parameters'),
    401: ('Unauthorized', 'Authentication required'),
    403: ('Forbidden', 'You do not have permission to access this resource'),
    404: ('Not Found', 'The requested resource was not found'),
    405: ('Method Not Allowed', 'The method is not allowed for the requested URL'),
    413: ('Payload Too Large', 'The request is too large'),
    429: ('Rate Limit Exceeded', 'Too many requests. Please try again later'),
    503: ('Service Unavailable', 'The service is temporarily unavailable. Please try again later'),
}


def setup_error_handlers(app: Flask):
    """
    Map every failure to {"error", "message"} JSON without stack traces

    Args:
        app: Flask application instance
    """
    include_details = app.debug

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return error_response('Validation Error', error.message, 400)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """abort(), Unauthorized, Forbidden, NotFound and friends"""
        title, message = HTTP_ERROR_MESSAGES.get(error.code, (error.name, error.description))
        if error.description and error.description != type(error).description:
            message = error.description
        if error.code >= 500:
            logger.error(f"HTTP {error.code} on {request.path}: {error.description}")
        return error_response(title, message, error.code)

    @app.errorhandler(AIRateLimitError)
    def ai_rate_limited(error):
        logger.error(f"AI rate limit on {request.path}: {error}")
        return error_response('AI Rate Limit Exceeded', str(error), 500)

    @app.errorhandler(AIServiceUnavailable)
    def ai_unavailable(error):
        logger.error(f"AI service unavailable on {request.path}: {error}")
        return error_response('AI Service Unavailable', 'The AI service is not configured', 500)

    @app.errorhandler(AIServiceError)
    def ai_error(error):
        logger.error(f"AI service error on {request.path}: {error}")
        return error_response('AI Service Error', str(error), 500)

    @app.errorhandler(StorageError)
    def storage_error(error):
        logger.error(f"Storage error on {request.path}: {error}", exc_info=True)
        return jsonify(sanitize_error_response(error, include_details)), 500

    @app.errorhandler(Exception)
    def internal_server_error(error):
        logger.error(f"Unhandled error on {request.path}: {error}", exc_info=True)
        return jsonify(sanitize_error_response(error, include_details)), 500

    logger.info("Error handlers registered")


def setup_request_logging(app: Flask):
    """
    Log one line per API request with status and duration

    Args:
        app: Flask application instance
    """
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_response(response: Response) -> Response:
        if request.path in QUIET_PATHS:
            return response

        started = g.pop('request_started', None)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0
        logger.info(
            f"{request.method} {request.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms, {response.content_length or 0} bytes) "
            f"from {request.remote_addr}"
        )
        return response

    logger.info("Request logging configured")


def required_environment(config: Dict[str, Any]) -> List[str]:
    """Environment variables the configured AI provider needs"""
    provider = (config.get('AI_PROVIDER') or 'openai').lower()
    if provider == 'azure':
        return ['SECRET_KEY', 'AZURE_OPENAI_API_KEY', 'AZURE_OPENAI_ENDPOINT',
                'AZURE_OPENAI_DEPLOYMENT_NAME']
    if provider == 'anthropic':
        return ['SECRET_KEY', 'ANTHROPIC_API_KEY']
    return ['SECRET_KEY', 'OPENAI_API_KEY']


def validate_environment_variables(required_vars: List[str]) -> List[str]:
    """
    Report required environment variables that are unset

    Returns:
        Names of the missing variables
    """
    missing = [name for name in required_vars if not os.environ.get(name)]
    if missing:
        logger.error(f"Missing required environment variables: {missing}")
        logger.error("AI features or sessions will not work until these are set")
    return missing


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Install all security middleware on the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    logger.info("Configuring application security...")

    app.secret_key = SecurityConfig.ensure_secret_key(config)
    setup_cors(app, config)
    setup_security_headers(app)
    setup_error_handlers(app)
    setup_request_logging(app)

    if not app.debug and not app.testing:
        validate_environment_variables(required_environment(config))

    logger.info("✅ Security configuration complete")
