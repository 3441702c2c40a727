"""
Authentication Routes Blueprint

Handles registration, login/logout and the current-user endpoint.
"""

from flask import Blueprint, request, jsonify
from werkzeug.exceptions import Unauthorized
import logging

from validators import validate_payload, RegisterRequest, LoginRequest, ValidationError

logger = logging.getLogger(__name__)

# Create blueprint
auth_bp = Blueprint('auth_bp', __name__)


def get_auth():
    """Get auth module - imported lazily to avoid circular imports"""
    import auth
    return auth


# ============================================================================
# REGISTRATION / LOGIN / LOGOUT
# ============================================================================

@auth_bp.route('/api/register', methods=['POST'])
def api_register():
    """Create an account and start a session for it"""
    auth = get_auth()
    payload = validate_payload(RegisterRequest, request.get_json(silent=True))

    user, error = auth.register_user(
        payload.username, payload.password, payload.email, payload.name
    )
    if error:
        raise ValidationError(error, field='username')

    auth.login_user(user)
    return jsonify(user), 201


@auth_bp.route('/api/login', methods=['POST'])
def api_login():
    """API endpoint for user login"""
    auth = get_auth()
    payload = validate_payload(LoginRequest, request.get_json(silent=True))

    user, error = auth.authenticate_user(payload.username, payload.password)
    if error:
        raise Unauthorized(error)

    auth.login_user(user)
    return jsonify(user)


@auth_bp.route('/api/logout', methods=['POST'])
def api_logout():
    """API endpoint for user logout"""
    auth = get_auth()
    auth.logout_user()
    return jsonify({'success': True})


@auth_bp.route('/api/user', methods=['GET'])
def api_current_user():
    """Return the logged in user"""
    auth = get_auth()
    user = auth.get_current_user()
    if user is None:
        raise Unauthorized("Authentication required")
    return jsonify(user)
