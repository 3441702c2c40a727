"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-16

Creates all core tables for the RCB Marketplace application.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )

    # Contractors table
    op.create_table('contractors',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('specialty', sa.String(100), nullable=False),
        sa.Column('specialties', JSON),
        sa.Column('profile_image', sa.Text()),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('min_rate', sa.Integer()),
        sa.Column('max_rate', sa.Integer()),
        sa.Column('rating', sa.Float(), default=0),
        sa.Column('review_count', sa.Integer(), default=0),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contractors_specialty', 'contractors', ['specialty'])

    # Projects table
    op.create_table('projects',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('project_type', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='planning'),
        sa.Column('estimated_cost_min', sa.Integer()),
        sa.Column('estimated_cost_max', sa.Integer()),
        sa.Column('actual_cost', sa.Integer()),
        sa.Column('timeline', sa.Text()),
        sa.Column('location', sa.String(255)),
        sa.Column('square_footage', sa.Integer()),
        sa.Column('details', JSON),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_projects_user', 'projects', ['user_id'])
    op.create_index('ix_projects_status', 'projects', ['status'])

    # Quotes table
    op.create_table('quotes',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('contractor_id', sa.String(36), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('amount', sa.Integer()),
        sa.Column('description', sa.Text()),
        sa.Column('timeline', sa.Text()),
        sa.Column('details', JSON),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id']),
        sa.ForeignKeyConstraint(['contractor_id'], ['contractors.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_quotes_project', 'quotes', ['project_id'])
    op.create_index('ix_quotes_contractor', 'quotes', ['contractor_id'])

    # Reviews table
    op.create_table('reviews',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('contractor_id', sa.String(36), nullable=False),
        sa.Column('project_id', sa.String(36)),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['contractor_id'], ['contractors.id']),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reviews_contractor', 'reviews', ['contractor_id'])
    op.create_index('ix_reviews_user', 'reviews', ['user_id'])

    # Design inspirations table
    op.create_table('design_inspirations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('room', sa.String(100), nullable=False),
        sa.Column('style', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('image_url', sa.Text()),
        sa.Column('prompt', sa.Text()),
        sa.Column('tips', JSON),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_design_inspirations_user', 'design_inspirations', ['user_id'])


def downgrade() -> None:
    op.drop_table('design_inspirations')
    op.drop_table('reviews')
    op.drop_table('quotes')
    op.drop_table('projects')
    op.drop_table('contractors')
    op.drop_table('users')
