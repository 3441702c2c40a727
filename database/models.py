"""
SQLAlchemy models for the RCB Marketplace.
Defines the tables for users, contractors, projects, quotes, reviews and design inspirations.

API representations use camelCase keys; columns use snake_case.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Float, DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from database.connection import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# USERS
# =============================================================================

class User(Base):
    """Homeowners using the marketplace."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    projects = relationship("Project", back_populates="user")
    reviews = relationship("Review", back_populates="user")
    design_inspirations = relationship("DesignInspiration", back_populates="user")

    def to_dict(self, include_sensitive=False):
        data = {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'name': self.name,
            'createdAt': _iso(self.created_at),
        }
        if include_sensitive:
            data['password'] = self.password_hash
        return data


# =============================================================================
# CONTRACTORS
# =============================================================================

class Contractor(Base):
    """Service providers listed in the directory."""
    __tablename__ = 'contractors'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    specialty = Column(String(100), nullable=False)  # General, Specialist, Electrical, ...
    specialties = Column(JSONType, default=list)     # ['Kitchen', 'Bathroom']
    profile_image = Column(Text)
    email = Column(String(255), nullable=False)
    phone = Column(String(50))
    location = Column(String(255), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    min_rate = Column(Integer)
    max_rate = Column(Integer)
    rating = Column(Float, default=0)
    review_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    quotes = relationship("Quote", back_populates="contractor")
    reviews = relationship("Review", back_populates="contractor")

    __table_args__ = (
        Index('ix_contractors_specialty', 'specialty'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'specialty': self.specialty,
            'specialties': self.specialties or [],
            'profileImage': self.profile_image,
            'email': self.email,
            'phone': self.phone,
            'location': self.location,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'minRate': self.min_rate,
            'maxRate': self.max_rate,
            'rating': self.rating or 0,
            'reviewCount': self.review_count or 0,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# PROJECTS
# =============================================================================

class Project(Base):
    """Renovation or construction efforts owned by one user."""
    __tablename__ = 'projects'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    name = Column(String(255), nullable=False)
    project_type = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(50), nullable=False, default='planning')  # planning, in-progress, completed
    estimated_cost_min = Column(Integer)
    estimated_cost_max = Column(Integer)
    actual_cost = Column(Integer)
    timeline = Column(Text)
    location = Column(String(255))
    square_footage = Column(Integer)
    details = Column(JSONType)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="projects")
    quotes = relationship("Quote", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_projects_user', 'user_id'),
        Index('ix_projects_status', 'status'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'type': self.project_type,
            'description': self.description,
            'status': self.status,
            'estimatedCostMin': self.estimated_cost_min,
            'estimatedCostMax': self.estimated_cost_max,
            'actualCost': self.actual_cost,
            'timeline': self.timeline,
            'location': self.location,
            'squareFootage': self.square_footage,
            'details': self.details,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


# =============================================================================
# QUOTES
# =============================================================================

class Quote(Base):
    """Per-contractor cost/timeline response tied to one project."""
    __tablename__ = 'quotes'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey('projects.id'), nullable=False)
    contractor_id = Column(String(36), ForeignKey('contractors.id'), nullable=False)
    status = Column(String(50), nullable=False, default='pending')  # pending, received, accepted, rejected, completed
    amount = Column(Integer)
    description = Column(Text)
    timeline = Column(Text)
    details = Column(JSONType)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="quotes")
    contractor = relationship("Contractor", back_populates="quotes")

    __table_args__ = (
        Index('ix_quotes_project', 'project_id'),
        Index('ix_quotes_contractor', 'contractor_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'projectId': self.project_id,
            'contractorId': self.contractor_id,
            'status': self.status,
            'amount': self.amount,
            'description': self.description,
            'timeline': self.timeline,
            'details': self.details,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# REVIEWS
# =============================================================================

class Review(Base):
    """Rating and text a user attaches to a contractor."""
    __tablename__ = 'reviews'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    contractor_id = Column(String(36), ForeignKey('contractors.id'), nullable=False)
    project_id = Column(String(36), ForeignKey('projects.id', ondelete='SET NULL'))
    rating = Column(Integer, nullable=False)
    review = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="reviews")
    contractor = relationship("Contractor", back_populates="reviews")

    __table_args__ = (
        Index('ix_reviews_contractor', 'contractor_id'),
        Index('ix_reviews_user', 'user_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'contractorId': self.contractor_id,
            'projectId': self.project_id,
            'rating': self.rating,
            'review': self.review,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# DESIGN INSPIRATIONS
# =============================================================================

class DesignInspiration(Base):
    """AI generated design ideas saved for a user."""
    __tablename__ = 'design_inspirations'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    room = Column(String(100), nullable=False)
    style = Column(String(100), nullable=False)
    description = Column(Text)
    image_url = Column(Text)
    prompt = Column(Text)
    tips = Column(JSONType, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="design_inspirations")

    __table_args__ = (
        Index('ix_design_inspirations_user', 'user_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'room': self.room,
            'style': self.style,
            'description': self.description,
            'imageUrl': self.image_url,
            'prompt': self.prompt,
            'tips': self.tips or [],
            'createdAt': _iso(self.created_at),
        }
