"""
Storage contract - the single interface through which the application reads and
writes marketplace entities.

Two adapters implement it:
- SqlStorage: SQLAlchemy over a relational database (PostgreSQL in production)
- DocumentStorage: JSON document collections on disk

Reads return a dict or None and never raise for absence. Writes return the
persisted dict with generated id/timestamps, or raise StorageError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from config import validate_storage_config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backing store fails to persist or load an entity"""
    pass


class Storage(ABC):
    """Abstract storage contract shared by all persistence adapters."""

    backend_name = 'abstract'

    # =========================================================================
    # USERS
    # =========================================================================

    @abstractmethod
    def get_user(self, user_id: str, include_sensitive: bool = False) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str, include_sensitive: bool = False) -> Optional[Dict]:
        ...

    @abstractmethod
    def create_user(self, data: Dict) -> Dict:
        """Create a user. ``data['password']`` must already be hashed."""

    # =========================================================================
    # CONTRACTORS
    # =========================================================================

    @abstractmethod
    def get_contractor(self, contractor_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_all_contractors(self) -> List[Dict]:
        ...

    @abstractmethod
    def get_contractors_by_specialty(self, specialty: str) -> List[Dict]:
        ...

    @abstractmethod
    def search_contractors(self, query: str) -> List[Dict]:
        ...

    @abstractmethod
    def create_contractor(self, data: Dict) -> Dict:
        ...

    @abstractmethod
    def update_contractor_rating(self, contractor_id: str, rating: float, review_count: int) -> None:
        ...

    # =========================================================================
    # PROJECTS
    # =========================================================================

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_projects_by_user_id(self, user_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def create_project(self, data: Dict) -> Dict:
        ...

    @abstractmethod
    def update_project(self, project_id: str, data: Dict) -> Optional[Dict]:
        ...

    @abstractmethod
    def delete_project(self, project_id: str) -> bool:
        """Delete a project together with its quotes."""

    # =========================================================================
    # QUOTES
    # =========================================================================

    @abstractmethod
    def get_quote(self, quote_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_quotes_by_project_id(self, project_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def get_quotes_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def create_quote(self, data: Dict) -> Dict:
        ...

    @abstractmethod
    def update_quote(self, quote_id: str, data: Dict) -> Optional[Dict]:
        ...

    @abstractmethod
    def delete_quote(self, quote_id: str) -> bool:
        ...

    # =========================================================================
    # REVIEWS
    # =========================================================================

    @abstractmethod
    def get_review(self, review_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_reviews_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def get_reviews_by_user_id(self, user_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def create_review(self, data: Dict) -> Dict:
        """Persist a review and recompute the contractor's rating and review count."""

    # =========================================================================
    # DESIGN INSPIRATIONS
    # =========================================================================

    @abstractmethod
    def get_design_inspiration(self, inspiration_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def get_design_inspirations_by_user_id(self, user_id: str) -> List[Dict]:
        ...

    @abstractmethod
    def create_design_inspiration(self, data: Dict) -> Dict:
        ...

    # =========================================================================
    # HOUSEKEEPING
    # =========================================================================

    def seed_contractors(self, contractors: List[Dict]) -> int:
        """Insert the given contractors only when the directory is empty."""
        if self.get_all_contractors():
            return 0
        for contractor in contractors:
            self.create_contractor(contractor)
        return len(contractors)

    @abstractmethod
    def check_health(self) -> Dict:
        ...

    def close(self) -> None:
        """Release resources held by the adapter."""


def average_rating(ratings: List[int]) -> float:
    """Mean of review ratings, 0 when there are none."""
    if not ratings:
        return 0
    return sum(ratings) / len(ratings)


# Contractor fields every adapter requires on create
CONTRACTOR_REQUIRED_FIELDS = ('name', 'description', 'specialty', 'email', 'location')

CONTRACTOR_SEARCH_FIELDS = ('name', 'description', 'specialty', 'location')


def check_contractor_fields(data: Dict) -> None:
    """Raise StorageError when a contractor payload lacks a required field."""
    missing = [key for key in CONTRACTOR_REQUIRED_FIELDS if data.get(key) is None]
    if missing:
        raise StorageError(f"Contractor is missing required fields: {', '.join(missing)}")


def has_specialty(contractor: Dict, specialty: str) -> bool:
    """Exact, case-insensitive match on the category or any skill tag."""
    wanted = specialty.lower()
    if (contractor.get('specialty') or '').lower() == wanted:
        return True
    return any(tag.lower() == wanted for tag in contractor.get('specialties') or [])


def matches_search(contractor: Dict, query: str) -> bool:
    """Case-insensitive substring match over the text fields and skill tags."""
    needle = query.lower()
    haystack = [contractor.get(key) or '' for key in CONTRACTOR_SEARCH_FIELDS]
    haystack.extend(contractor.get('specialties') or [])
    return any(needle in value.lower() for value in haystack)


def create_storage(config) -> Storage:
    """
    Build the storage adapter selected by configuration.

    Args:
        config: Flask config mapping

    Returns:
        Storage implementation

    Raises:
        StoragePolicyError: If the configuration is not allowed in this environment
    """
    mode = validate_storage_config(config)

    if mode == 'sql':
        from services.sql_storage import SqlStorage
        storage = SqlStorage(config['DATABASE_URL'], echo=config.get('SQLALCHEMY_ECHO', False))
    else:
        from services.document_storage import DocumentStorage
        storage = DocumentStorage(config['DOCUMENT_STORE_FOLDER'])

    logger.info(f"Storage backend: {storage.backend_name}")
    return storage
