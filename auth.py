"""
User Authentication and Authorization Module
Handles password hashing, session login/logout, and ownership checks.

Sessions live in Flask's signed cookie session; only the user id is stored.
Every ownership decision goes through can(actor, action, resource).
"""
from functools import wraps
from typing import Optional, Dict

from flask import session, g, current_app
from werkzeug.exceptions import Unauthorized, Forbidden, NotFound
from werkzeug.security import generate_password_hash, check_password_hash
import logging

logger = logging.getLogger(__name__)


# Use pbkdf2 method which is compatible with older Python/OpenSSL versions
def safe_generate_password_hash(password):
    """Generate password hash using pbkdf2 for compatibility"""
    return generate_password_hash(password, method='pbkdf2:sha256')


def safe_check_password_hash(pwhash, password):
    """Check a password against its stored hash"""
    if not pwhash:
        return False
    return check_password_hash(pwhash, password)


def get_storage():
    """Storage contract attached to the running app"""
    return current_app.storage


# ============================================================================
# AUTHENTICATION
# ============================================================================

def authenticate_user(username, password):
    """
    Authenticate user with username and password

    Returns:
        (user, None) on success, (None, error message) otherwise
    """
    user = get_storage().get_user_by_username(username, include_sensitive=True)

    if not user or not safe_check_password_hash(user.get('password'), password):
        logger.info(f"Failed login for username: {username}")
        return None, "Invalid username or password"

    user.pop('password', None)
    logger.info(f"User authenticated: {username}")
    return user, None


def register_user(username, password, email, name):
    """
    Create a user with a hashed password

    Returns:
        (user, None) on success, (None, error message) if the username is taken
    """
    storage = get_storage()
    if storage.get_user_by_username(username):
        return None, "Username already exists"

    user = storage.create_user({
        'username': username,
        'password': safe_generate_password_hash(password),
        'email': email,
        'name': name,
    })
    logger.info(f"Registered new user: {username}")
    return user, None


def login_user(user):
    """Set user session"""
    session.clear()
    session['user_id'] = user['id']
    session.permanent = True
    g.current_user = user


def logout_user():
    """Clear user session"""
    session.clear()
    g.pop('current_user', None)


def get_current_user() -> Optional[Dict]:
    """Get currently logged in user (cached per request)"""
    if 'current_user' in g:
        return g.current_user

    user = None
    user_id = session.get('user_id')
    if user_id:
        user = get_storage().get_user(user_id)
        if user is None:
            # Stale cookie for a user that no longer exists
            session.pop('user_id', None)
    g.current_user = user
    return user


def is_authenticated():
    """Check if user is logged in"""
    return get_current_user() is not None


# Decorators for route protection
def login_required(f):
    """Decorator to require login for a route"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated():
            raise Unauthorized("Authentication required")
        return f(*args, **kwargs)
    return decorated_function


# ============================================================================
# AUTHORIZATION
# ============================================================================

PROJECT_ACTIONS = ('read', 'update', 'delete', 'request_quotes')
QUOTE_ACTIONS = ('read', 'update')


def can(actor: Optional[Dict], action: str, resource: Optional[Dict]) -> bool:
    """
    Decide whether actor may perform action on resource.

    Projects belong to their creator. Quotes inherit the owner of their
    parent project, so callers pass the parent project for quote actions.
    """
    if not actor or not resource:
        return False
    if action not in PROJECT_ACTIONS and action not in QUOTE_ACTIONS:
        return False
    return resource.get('userId') == actor.get('id')


def authorize(action: str, resource: Dict, actor: Optional[Dict] = None) -> None:
    """Raise Forbidden unless the current user may act on resource"""
    actor = actor or get_current_user()
    if not can(actor, action, resource):
        logger.warning(
            f"Denied {action} on {resource.get('id')} for user {actor.get('id') if actor else None}"
        )
        raise Forbidden("You do not have permission to access this resource")


def load_authorized_project(project_id: str, action: str = 'read') -> Dict:
    """
    Load a project and check the current user may act on it

    Raises:
        NotFound: If the project does not exist
        Forbidden: If the current user does not own it
    """
    project = get_storage().get_project(project_id)
    if project is None:
        raise NotFound("Project not found")
    authorize(action, project)
    return project


def load_authorized_quote(quote_id: str, action: str = 'read') -> Dict:
    """
    Load a quote and check the current user owns its parent project

    Raises:
        NotFound: If the quote or its project does not exist
        Forbidden: If the current user does not own the project
    """
    quote = get_storage().get_quote(quote_id)
    if quote is None:
        raise NotFound("Quote not found")
    load_authorized_project(quote['projectId'], action)
    return quote
