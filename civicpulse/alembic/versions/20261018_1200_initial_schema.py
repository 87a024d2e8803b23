"""initial_schema

Revision ID: 4c1e2d7a9b30
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c1e2d7a9b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_subject', 'users', ['subject'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'complaints',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('authority', sa.String(length=50), nullable=False),
        sa.Column('urgency', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('votes', sa.Integer(), nullable=False),
        sa.Column('assigned_to', sa.String(length=255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('location_label', sa.String(length=500), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_complaints_category', 'complaints', ['category'])
    op.create_index('ix_complaints_status', 'complaints', ['status'])
    op.create_index('idx_complaints_status_created', 'complaints', ['status', 'created_at'])
    op.create_index('idx_complaints_creator', 'complaints', ['created_by'])
    op.create_index('idx_complaints_position', 'complaints', ['latitude', 'longitude'])

    op.create_table(
        'complaint_comments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('complaint_id', sa.Uuid(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['complaint_id'], ['complaints.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_complaint_comments_complaint_id', 'complaint_comments', ['complaint_id'])

    # Photos and audio notes stored as BYTEA
    op.create_table(
        'complaint_attachments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('complaint_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('data', sa.LargeBinary(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['complaint_id'], ['complaints.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_complaint_attachments_complaint_id', 'complaint_attachments', ['complaint_id'])

    op.create_table(
        'cache_entries',
        sa.Column('key', sa.String(length=500), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('operation', sa.String(length=50), nullable=False),
        sa.Column('params', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('hit_count', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )
    op.create_index('ix_cache_entries_provider', 'cache_entries', ['provider'])
    op.create_index('ix_cache_entries_operation', 'cache_entries', ['operation'])
    op.create_index('ix_cache_entries_expires_at', 'cache_entries', ['expires_at'])
    op.create_index('idx_cache_operation_expires', 'cache_entries', ['operation', 'expires_at'])


def downgrade() -> None:
    op.drop_index('idx_cache_operation_expires', table_name='cache_entries')
    op.drop_index('ix_cache_entries_expires_at', table_name='cache_entries')
    op.drop_index('ix_cache_entries_operation', table_name='cache_entries')
    op.drop_index('ix_cache_entries_provider', table_name='cache_entries')
    op.drop_table('cache_entries')

    op.drop_index('ix_complaint_attachments_complaint_id', table_name='complaint_attachments')
    op.drop_table('complaint_attachments')

    op.drop_index('ix_complaint_comments_complaint_id', table_name='complaint_comments')
    op.drop_table('complaint_comments')

    op.drop_index('idx_complaints_position', table_name='complaints')
    op.drop_index('idx_complaints_creator', table_name='complaints')
    op.drop_index('idx_complaints_status_created', table_name='complaints')
    op.drop_index('ix_complaints_status', table_name='complaints')
    op.drop_index('ix_complaints_category', table_name='complaints')
    op.drop_table('complaints')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_subject', table_name='users')
    op.drop_table('users')
