"""
SQL storage adapter - relational persistence for the marketplace entities.
Every operation runs inside its own session; the session commits on success
and rolls back on any exception.
"""

import json
import logging
from datetime import datetime
from functools import wraps
from typing import List, Optional, Dict

from sqlalchemy import or_, func, cast, String
from sqlalchemy.exc import SQLAlchemyError

from database.connection import (
    configure_engine, get_db_session, init_db, check_db_connection, dispose_engine
)
from database.models import User, Contractor, Project, Quote, Review, DesignInspiration
from services.storage import (
    Storage, StorageError, average_rating, check_contractor_fields, has_specialty, matches_search
)

logger = logging.getLogger(__name__)


def _wrap_errors(operation):
    """Convert driver/ORM failures into StorageError."""
    @wraps(operation)
    def wrapper(*args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"{operation.__name__} failed: {e}")
            raise StorageError(f"Database operation failed: {operation.__name__}") from e
    return wrapper


class SqlStorage(Storage):
    """Storage contract backed by SQLAlchemy."""

    backend_name = 'sql'

    # Map API field names to database column names
    PROJECT_FIELDS = {
        'name': 'name',
        'type': 'project_type',
        'description': 'description',
        'status': 'status',
        'estimatedCostMin': 'estimated_cost_min',
        'estimatedCostMax': 'estimated_cost_max',
        'actualCost': 'actual_cost',
        'timeline': 'timeline',
        'location': 'location',
        'squareFootage': 'square_footage',
        'details': 'details',
    }

    QUOTE_FIELDS = {
        'status': 'status',
        'amount': 'amount',
        'description': 'description',
        'timeline': 'timeline',
        'details': 'details',
    }

    CONTRACTOR_FIELDS = {
        'name': 'name',
        'description': 'description',
        'specialty': 'specialty',
        'specialties': 'specialties',
        'profileImage': 'profile_image',
        'email': 'email',
        'phone': 'phone',
        'location': 'location',
        'latitude': 'latitude',
        'longitude': 'longitude',
        'minRate': 'min_rate',
        'maxRate': 'max_rate',
    }

    def __init__(self, database_url: str, echo: bool = False, create_tables: bool = True):
        self.database_url = database_url
        configure_engine(database_url, echo=echo)
        if create_tables:
            init_db()

    @staticmethod
    def _columns(data: Dict, mapping: Dict) -> Dict:
        return {column: data[key] for key, column in mapping.items() if key in data}

    # =========================================================================
    # USERS
    # =========================================================================

    @_wrap_errors
    def get_user(self, user_id: str, include_sensitive: bool = False) -> Optional[Dict]:
        with get_db_session() as session:
            user = session.query(User).filter(User.id == user_id).first()
            return user.to_dict(include_sensitive=include_sensitive) if user else None

    @_wrap_errors
    def get_user_by_username(self, username: str, include_sensitive: bool = False) -> Optional[Dict]:
        with get_db_session() as session:
            user = session.query(User).filter(User.username == username).first()
            return user.to_dict(include_sensitive=include_sensitive) if user else None

    @_wrap_errors
    def create_user(self, data: Dict) -> Dict:
        with get_db_session() as session:
            user = User(
                username=data['username'],
                password_hash=data['password'],
                email=data['email'],
                name=data['name'],
            )
            session.add(user)
            session.flush()
            logger.info(f"Created user: {user.id}")
            return user.to_dict()

    # =========================================================================
    # CONTRACTORS
    # =========================================================================

    @_wrap_errors
    def get_contractor(self, contractor_id: str) -> Optional[Dict]:
        with get_db_session() as session:
            contractor = session.query(Contractor).filter(Contractor.id == contractor_id).first()
            return contractor.to_dict() if contractor else None

    @_wrap_errors
    def get_all_contractors(self) -> List[Dict]:
        with get_db_session() as session:
            contractors = session.query(Contractor).order_by(Contractor.name).all()
            return [c.to_dict() for c in contractors]

    @_wrap_errors
    def get_contractors_by_specialty(self, specialty: str) -> List[Dict]:
        # specialties is stored as a JSON list, so an exact tag match is the tag as a JSON string
        tag = json.dumps(specialty, ensure_ascii=False)
        with get_db_session() as session:
            contractors = session.query(Contractor).filter(
                or_(
                    func.lower(Contractor.specialty) == specialty.lower(),
                    cast(Contractor.specialties, String).icontains(tag, autoescape=True)
                )
            ).order_by(Contractor.name).all()
            return [d for d in (c.to_dict() for c in contractors) if has_specialty(d, specialty)]

    @_wrap_errors
    def search_contractors(self, query: str) -> List[Dict]:
        columns = (
            Contractor.name,
            Contractor.description,
            Contractor.specialty,
            Contractor.location,
            cast(Contractor.specialties, String),
        )
        with get_db_session() as session:
            # autoescape: % and _ in the query are literal characters, not wildcards
            contractors = session.query(Contractor).filter(
                or_(*[column.icontains(query, autoescape=True) for column in columns])
            ).order_by(Contractor.name).all()
            # The JSON text also holds brackets and quotes, so confirm against the tags themselves
            return [d for d in (c.to_dict() for c in contractors) if matches_search(d, query)]

    @_wrap_errors
    def create_contractor(self, data: Dict) -> Dict:
        check_contractor_fields(data)
        with get_db_session() as session:
            contractor = Contractor(**self._columns(data, self.CONTRACTOR_FIELDS))
            contractor.specialties = data.get('specialties', [])
            contractor.rating = data.get('rating', 0)
            contractor.review_count = data.get('reviewCount', 0)
            session.add(contractor)
            session.flush()
            logger.info(f"Created contractor: {contractor.id}")
            return contractor.to_dict()

    @_wrap_errors
    def update_contractor_rating(self, contractor_id: str, rating: float, review_count: int) -> None:
        with get_db_session() as session:
            contractor = session.query(Contractor).filter(Contractor.id == contractor_id).first()
            if not contractor:
                return
            contractor.rating = rating
            contractor.review_count = review_count
            logger.info(f"Updated contractor rating: {contractor_id} -> {rating} ({review_count})")

    # =========================================================================
    # PROJECTS
    # =========================================================================

    @_wrap_errors
    def get_project(self, project_id: str) -> Optional[Dict]:
        with get_db_session() as session:
            project = session.query(Project).filter(Project.id == project_id).first()
            return project.to_dict() if project else None

    @_wrap_errors
    def get_projects_by_user_id(self, user_id: str) -> List[Dict]:
        with get_db_session() as session:
            projects = session.query(Project).filter(
                Project.user_id == user_id
            ).order_by(Project.created_at.desc()).all()
            return [p.to_dict() for p in projects]

    @_wrap_errors
    def create_project(self, data: Dict) -> Dict:
        with get_db_session() as session:
            project = Project(user_id=data['userId'], **self._columns(data, self.PROJECT_FIELDS))
            if not project.status:
                project.status = 'planning'
            session.add(project)
            session.flush()
            logger.info(f"Created project: {project.id}")
            return project.to_dict()

    @_wrap_errors
    def update_project(self, project_id: str, data: Dict) -> Optional[Dict]:
        with get_db_session() as session:
            project = session.query(Project).filter(Project.id == project_id).first()
            if not project:
                return None
            for column, value in self._columns(data, self.PROJECT_FIELDS).items():
                setattr(project, column, value)
            project.updated_at = datetime.utcnow()
            session.flush()
            logger.info(f"Updated project: {project_id}")
            return project.to_dict()

    @_wrap_errors
    def delete_project(self, project_id: str) -> bool:
        with get_db_session() as session:
            project = session.query(Project).filter(Project.id == project_id).first()
            if not project:
                return False
            # Quotes go with the project through the delete-orphan cascade
            session.query(Review).filter(Review.project_id == project_id).update(
                {Review.project_id: None}, synchronize_session=False
            )
            session.delete(project)
            logger.info(f"Deleted project: {project_id}")
            return True

    # =========================================================================
    # QUOTES
    # =========================================================================

    @_wrap_errors
    def get_quote(self, quote_id: str) -> Optional[Dict]:
        with get_db_session() as session:
            quote = session.query(Quote).filter(Quote.id == quote_id).first()
            return quote.to_dict() if quote else None

    @_wrap_errors
    def get_quotes_by_project_id(self, project_id: str) -> List[Dict]:
        with get_db_session() as session:
            quotes = session.query(Quote).filter(
                Quote.project_id == project_id
            ).order_by(Quote.created_at).all()
            return [q.to_dict() for q in quotes]

    @_wrap_errors
    def get_quotes_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        with get_db_session() as session:
            quotes = session.query(Quote).filter(
                Quote.contractor_id == contractor_id
            ).order_by(Quote.created_at).all()
            return [q.to_dict() for q in quotes]

    @_wrap_errors
    def create_quote(self, data: Dict) -> Dict:
        with get_db_session() as session:
            quote = Quote(
                project_id=data['projectId'],
                contractor_id=data['contractorId'],
                **self._columns(data, self.QUOTE_FIELDS)
            )
            if not quote.status:
                quote.status = 'pending'
            session.add(quote)
            session.flush()
            logger.info(f"Created quote: {quote.id}")
            return quote.to_dict()

    @_wrap_errors
    def update_quote(self, quote_id: str, data: Dict) -> Optional[Dict]:
        with get_db_session() as session:
            quote = session.query(Quote).filter(Quote.id == quote_id).first()
            if not quote:
                return None
            for column, value in self._columns(data, self.QUOTE_FIELDS).items():
                setattr(quote, column, value)
            session.flush()
            logger.info(f"Updated quote: {quote_id}")
            return quote.to_dict()

    @_wrap_errors
    def delete_quote(self, quote_id: str) -> bool:
        with get_db_session() as session:
            deleted = session.query(Quote).filter(Quote.id == quote_id).delete()
            if deleted:
                logger.info(f"Deleted quote: {quote_id}")
            return bool(deleted)

    # =========================================================================
    # REVIEWS
    # =========================================================================

    @_wrap_errors
    def get_review(self, review_id: str) -> Optional[Dict]:
        with get_db_session() as session:
            review = session.query(Review).filter(Review.id == review_id).first()
            return review.to_dict() if review else None

    @_wrap_errors
    def get_reviews_by_contractor_id(self, contractor_id: str) -> List[Dict]:
        with get_db_session() as session:
            reviews = session.query(Review).filter(
                Review.contractor_id == contractor_id
            ).order_by(Review.created_at.desc()).all()
            return [r.to_dict() for r in reviews]

    @_wrap_errors
    def get_reviews_by_user_id(self, user_id: str) -> List[Dict]:
        with get_db_session() as session:
            reviews = session.query(Review).filter(
                Review.user_id == user_id
            ).order_by(Review.created_at.desc()).all()
            return [r.to_dict() for r in reviews]

    @staticmethod
    def _contractor_for_update(session, contractor_id: str):
        """Contractor query that row-locks it until the transaction ends."""
        return session.query(Contractor).filter(Contractor.id == contractor_id).with_for_update()

    @_wrap_errors
    def create_review(self, data: Dict) -> Dict:
        with get_db_session() as session:
            # Concurrent reviews of one contractor queue here, so each recount sees every review
            contractor = self._contractor_for_update(session, data['contractorId']).first()

            review = Review(
                user_id=data['userId'],
                contractor_id=data['contractorId'],
                project_id=data.get('projectId'),
                rating=data['rating'],
                review=data.get('review'),
            )
            session.add(review)
            session.flush()

            # Recompute in the same transaction so the rating never lags the reviews
            ratings = [r for (r,) in session.query(Review.rating).filter(
                Review.contractor_id == review.contractor_id
            ).all()]
            if contractor:
                contractor.rating = average_rating(ratings)
                contractor.review_count = len(ratings)

            logger.info(f"Created review: {review.id} for contractor {review.contractor_id}")
            return review.to_dict()

    # =========================================================================
    # DESIGN INSPIRATIONS
    # =========================================================================

    @_wrap_errors
    def get_design_inspiration(self, inspiration_id: str) -> Optional[Dict]:
        with get_db_session() as session:
            inspiration = session.query(DesignInspiration).filter(
                DesignInspiration.id == inspiration_id
            ).first()
            return inspiration.to_dict() if inspiration else None

    @_wrap_errors
    def get_design_inspirations_by_user_id(self, user_id: str) -> List[Dict]:
        with get_db_session() as session:
            inspirations = session.query(DesignInspiration).filter(
                DesignInspiration.user_id == user_id
            ).order_by(DesignInspiration.created_at.desc()).all()
            return [i.to_dict() for i in inspirations]

    @_wrap_errors
    def create_design_inspiration(self, data: Dict) -> Dict:
        with get_db_session() as session:
            inspiration = DesignInspiration(
                user_id=data['userId'],
                room=data['room'],
                style=data['style'],
                description=data.get('description'),
                image_url=data.get('imageUrl'),
                prompt=data.get('prompt'),
                tips=data.get('tips', []),
            )
            session.add(inspiration)
            session.flush()
            logger.info(f"Created design inspiration: {inspiration.id}")
            return inspiration.to_dict()

    # =========================================================================
    # HOUSEKEEPING
    # =========================================================================

    def check_health(self) -> Dict:
        try:
            check_db_connection()
            return {'status': 'healthy', 'backend': self.backend_name}
        except RuntimeError as e:
            return {'status': 'unhealthy', 'backend': self.backend_name, 'error': str(e)}

    def close(self) -> None:
        dispose_engine()
        logger.info("SQL storage closed")
