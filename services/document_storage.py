"""
Document storage adapter - JSON document collections on disk.

Each entity type lives in its own collection file under the configured folder
(users.json, contractors.json, ...). Documents are stored with the same
camelCase keys the API returns. A single lock serializes every read-modify-write
so concurrent requests within one process never interleave.
"""

import os
import logging
import threading
import uuid
from datetime import datetime
from typing import List, Optional, Dict, Callable

from app.utils.helpers import load_json_file, save_json_file
from services.storage import (
    Storage, StorageError, average_rating, check_contractor_fields, has_specialty, matches_search
)

logger = logging.getLogger(__name__)

COLLECTIONS = ('users', 'contractors', 'projects', 'quotes', 'reviews', 'design_inspirations')

PROJECT_FIELDS = (
    'name', 'type', 'description', 'status', 'estimatedCostMin', 'estimatedCostMax',
    'actualCost', 'timeline', 'location', 'squareFootage', 'details'
)
QUOTE_FIELDS = ('status', 'amount', 'description', 'timeline', 'details')
CONTRACTOR_FIELDS = (
    'name', 'description', 'specialty', 'specialties', 'profileImage', 'email', 'phone',
    'location', 'latitude', 'longitude', 'minRate', 'maxRate'
)


def _now():
    return datetime.utcnow().isoformat()


def _new_id():
    return str(uuid.uuid4())


def _public_user(doc: Dict, include_sensitive: bool) -> Dict:
    user = dict(doc)
    if not include_sensitive:
        user.pop('password', None)
    return user


class DocumentStorage(Storage):
    """Storage contract backed by JSON collection files."""

    backend_name = 'document'

    def __init__(self, folder: str):
        self.folder = folder
        self._lock = threading.RLock()
        try:
            os.makedirs(folder, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create document store folder {folder}: {e}") from e
        logger.info(f"Document storage at {os.path.abspath(folder)}")

    # =========================================================================
    # COLLECTION PRIMITIVES
    # =========================================================================

    def _path(self, collection: str) -> str:
        return os.path.join(self.folder, f"{collection}.json")

    def _load(self, collection: str) -> List[Dict]:
        try:
            return load_json_file(self._path(collection), default=[])
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read collection {collection}: {e}")
            raise StorageError(f"Failed to read {collection}") from e

    def _save(self, collection: str, docs: List[Dict]) -> None:
        try:
            save_json_file(self._path(collection), docs)
        except (OSError, TypeError) as e:
            logger.error(f"Failed to write collection {collection}: {e}")
            raise StorageError(f"Failed to write {collection}") from e

    def _find(self, collection: str, predicate: Callable[[Dict], bool]) -> List[Dict]:
        with self._lock:
            return [doc for doc in self._load(collection) if predicate(doc)]

    def _get(self, collection: str, doc_id: str) -> Optional[Dict]:
        matches = self._find(collection, lambda d: d.get('id') == doc_id)
        return matches[0] if matches else None

    def _insert(self, collection: str, doc: Dict) -> Dict:
        with self._lock:
            docs = self._load(collection)
            docs.append(doc)
            self._save(collection, docs)
        return dict(doc)

    def _update(self, collection: str, doc_id: str, changes: Dict) -> Optional[Dict]:
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if doc.get('id') == doc_id:
                    doc.update(changes)
                    self._save(collection, docs)
                    return dict(doc)
        return None

    def _delete_where(self, collection: str, predicate: Callable[[Dict], bool]) -> int:
        with self._lock:
            docs = self._load(collection)
            kept = [doc for doc in docs if not predicate(doc)]
            removed = len(docs) - len(kept)
            if removed:
                self._save(collection, kept)
            return removed

    @staticmethod
    def _newest_first(docs: List[Dict]) -> List[Dict]:
        return sorted(docs, key=lambda d: d.get('createdAt') or '', reverse=True)

    # =========================================================================
    # USERS
    # =========================================================================

    def get_user(self, user_id: str, include_sensitive: bool = False) -> Optional[Dict]:
        doc = self._get('users', user_id)
        return _public_user(doc, include_sensitive) if doc else None

    def get_user_by_username(self, username: str, include_sensitive: bool = False) -> Optional[Dict]:
        matches = self._find('users', lambda d: d.get('username') == username)
        return _public_user(matches[0], include_sensitive) if matches else None

    def create_user(self, data: Dict) -> Dict:
        with self._lock:
            if self._find('users', lambda d: d.get('username') == data['username']):
                raise StorageError(f"Username already exists: {data['username']}")
            doc = {
                'id': _new_id(),
                'username': data['username'],
                'password': data['password'],
                'email': data['email'],
                'name': data['name'],
                'createdAt': _now(),
            }
            self._insert('users', doc)
        logger.info(f"Created user: {doc['id']}")
        return _public_user(doc, include_sensitive=False)

    # =========================================================================
    # CONTRACTORS
    # =========================================================================

    def get_contractor(self, contractor_id: str) -> Optional[Dict]:
        return self._get('contractors', contractor_id)

    def get_all_contractors(self) -> List[Dict]:
        return sorted(self._find('contractors', lambda d: True), key=lambda d: d.get('name', ''))

    def get_contractors_by_specialty(self, specialty: str) -> List[Dict]:
        result = self._find('contractors', lambda d: has_specialty(d, specialty))
        return sorted(result, key=lambda d: d.get('name', ''))

    def search_contractors(self, query: str) -> List[Dict]:
        result = self._find('contractors', lambda d: matches_search(d, query))
        return sorted(result, key=lambda d: d.get('name', ''))

    def create_contractor(self, data: Dict) -> Dict:
        check_contractor_fields(data)
        doc = {key: data.get(key) for key in CONTRACTOR_FIELDS}
        doc.update(
            id=_new_id(),
            specialties=data.get('specialties') or [],
            rating=data.get('rating', 0),
            reviewCount=data.get('reviewCount', 0),
            createdAt=_now(),
        )
        self._insert('contractors', doc)
        logger.info(f"Created contractor: {doc['id']}")
        return dict(doc)

    def update_contractor_rating(self, contractor_id: str, rating: float, review_count: int) -> None:
        self._update('contractors', contractor_id, {'rating': rating, 'reviewCount': review_count})
        logger.info(f"Updated contractor rating: {contractor_id} -> {rating} ({review_count})")

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def get_project(self, project_id: str) -> Optional[Dict]:
        return self._get('projects', project_id)

    def get_projects_by_user_id(self, user_id: str) -> List[Dict]:
        return self._newest_first(self._find('projects', lambda d: d.get('userId') == user_id))

    def create_project(self, data: Dict) -> Dict:
        now = _now()
        doc = {key: data.get(key) for key in PROJECT_FIELDS}
        doc.update(
            id=_new_id(),
            userId=data['userId'],
            status=data.get('status') or 'planning',
            createdAt=now,
            updatedAt=now,
        )
        self._insert('projects', doc)
        logger.info(f"Created project: {doc['id']}")
        return dict(doc)

    def update_project(self, project_id: str, data: Dict) -> Optional[Dict]:
        changes = {key: data[key] for key in PROJECT_FIELDS if key in data}
        changes['updatedAt'] = _now()
        project = self._update('projects', project_id, changes)
        if project:
            logger.info(f"Updated project: {project_id}")
        return project

    def delete_project(self, project_id: str) -> bool:
        with self._lock:
            if not self._delete_where('projects', lambda d: d.get('id') == project_id):
                return False
            removed_quotes = self._delete_where('quotes', lambda d: d.get('projectId') == project_id)
            docs = self._load('reviews')
            if any(d.get('projectId') == project_id for d in docs):
                for doc in docs:
                    if doc.get('projectId') == project_id:
                        doc['projectId'] = None
                self._save('reviews', docs)
        logger.info(f"Deleted project: {project_id} ({removed_quotes} quotes)")
        return True

    # =========================================================================
    # QUOTES
    # =========================================================================

    def get_quote(self, quote_id: str) -> Optional[Dict]:
        return self._get('quotes', quote_id)

    def get_quotes_by_project_id(self, project_id: str) -> List[Dict]:
        return self._find('quotes', lambda d: d.get('projectId') == project_id)

    def get_quotes_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        return self._find('quotes', lambda d: d.get('contractorId') == contractor_id)

    def create_quote(self, data: Dict) -> Dict:
        doc = {key: data.get(key) for key in QUOTE_FIELDS}
        doc.update(
            id=_new_id(),
            projectId=data['projectId'],
            contractorId=data['contractorId'],
            status=data.get('status') or 'pending',
            createdAt=_now(),
        )
        self._insert('quotes', doc)
        logger.info(f"Created quote: {doc['id']}")
        return dict(doc)

    def update_quote(self, quote_id: str, data: Dict) -> Optional[Dict]:
        changes = {key: data[key] for key in QUOTE_FIELDS if key in data}
        quote = self._update('quotes', quote_id, changes)
        if quote:
            logger.info(f"Updated quote: {quote_id}")
        return quote

    def delete_quote(self, quote_id: str) -> bool:
        deleted = self._delete_where('quotes', lambda d: d.get('id') == quote_id)
        if deleted:
            logger.info(f"Deleted quote: {quote_id}")
        return bool(deleted)

    # =========================================================================
    # REVIEWS
    # =========================================================================

    def get_review(self, review_id: str) -> Optional[Dict]:
        return self._get('reviews', review_id)

    def get_reviews_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        return self._newest_first(
            self._find('reviews', lambda d: d.get('contractorId') == contractor_id)
        )

    def get_reviews_by_user_id(self, user_id: str) -> List[Dict]:
        return self._newest_first(self._find('reviews', lambda d: d.get('userId') == user_id))

    def create_review(self, data: Dict) -> Dict:
        doc = {
            'id': _new_id(),
            'userId': data['userId'],
            'contractorId': data['contractorId'],
            'projectId': data.get('projectId'),
            'rating': data['rating'],
            'review': data.get('review'),
            'createdAt': _now(),
        }
        # Held across insert and recompute so two reviews cannot race on the mean
        with self._lock:
            self._insert('reviews', doc)
            ratings = [
                r['rating'] for r in self._load('reviews')
                if r.get('contractorId') == doc['contractorId']
            ]
            self._update('contractors', doc['contractorId'], {
                'rating': average_rating(ratings),
                'reviewCount': len(ratings),
            })
        logger.info(f"Created review: {doc['id']} for contractor {doc['contractorId']}")
        return dict(doc)

    # =========================================================================
    # DESIGN INSPIRATIONS
    # =========================================================================

    def get_design_inspiration(self, inspiration_id: str) -> Optional[Dict]:
        return self._get('design_inspirations', inspiration_id)

    def get_design_inspirations_by_user_id(self, user_id: str) -> List[Dict]:
        return self._newest_first(
            self._find('design_inspirations', lambda d: d.get('userId') == user_id)
        )

    def create_design_inspiration(self, data: Dict) -> Dict:
        doc = {
            'id': _new_id(),
            'userId': data['userId'],
            'room': data['room'],
            'style': data['style'],
            'description': data.get('description'),
            'imageUrl': data.get('imageUrl'),
            'prompt': data.get('prompt'),
            'tips': data.get('tips') or [],
            'createdAt': _now(),
        }
        self._insert('design_inspirations', doc)
        logger.info(f"Created design inspiration: {doc['id']}")
        return dict(doc)

    # =========================================================================
    # HOUSEKEEPING
    # =========================================================================

    def seed_contractors(self, contractors: List[Dict]) -> int:
        with self._lock:
            return super().seed_contractors(contractors)

    def check_health(self) -> Dict:
        writable = os.path.isdir(self.folder) and os.access(self.folder, os.W_OK)
        if not writable:
            return {
                'status': 'unhealthy',
                'backend': self.backend_name,
                'error': f"Folder not writable: {self.folder}",
            }
        return {'status': 'healthy', 'backend': self.backend_name}
