"""
Database package for the RCB Marketplace.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    configure_engine,
    get_db_session,
    init_db,
    check_db_connection,
    dispose_engine
)

from database.models import (
    User,
    Contractor,
    Project,
    Quote,
    Review,
    DesignInspiration
)

__all__ = [
    # Connection
    'Base',
    'configure_engine',
    'get_db_session',
    'init_db',
    'check_db_connection',
    'dispose_engine',
    # Models
    'User',
    'Contractor',
    'Project',
    'Quote',
    'Review',
    'DesignInspiration'
]
