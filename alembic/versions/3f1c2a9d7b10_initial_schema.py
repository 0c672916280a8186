"""Initial schema: users, notes, shares, activity log, notifications

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2025-10-02 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from collabnotes.core.models.types import GUID, UTCDateTime


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', UTCDateTime(), nullable=False),
        sa.Column('updated_at', UTCDateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('refresh_token_hash', sa.String(length=64), nullable=True),
        sa.Column('refresh_token_expires_at', UTCDateTime(), nullable=True),
        sa.Column('password_reset_token_hash', sa.String(length=64), nullable=True),
        sa.Column('password_reset_expires_at', UTCDateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('length(name) <= 80', name='ck_users_name_len'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'notes',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('owner_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=40), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('is_trashed', sa.Boolean(), nullable=False),
        sa.Column('last_edited_by_id', GUID(), nullable=True),
        sa.Column('last_edited_at', UTCDateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.CheckConstraint('length(body) <= 10000', name='ck_notes_body_len'),
        sa.CheckConstraint('NOT (is_archived AND is_trashed)', name='ck_notes_archive_xor_trash'),
    )
    op.create_index('idx_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('idx_notes_owner_state', 'notes', ['owner_id', 'is_archived', 'is_trashed'])
    op.create_index('idx_notes_category', 'notes', ['category'])

    op.create_table(
        'note_shares',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('note_id', GUID(), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('note_id', 'user_id', name='uq_note_shares_note_user'),
    )
    op.create_index('idx_note_shares_user_id', 'note_shares', ['user_id'])

    op.create_table(
        'note_activities',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('note_id', GUID(), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=40), nullable=False),
        sa.Column('actor_id', GUID(), nullable=False),
        sa.Column('timestamp', UTCDateTime(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('note_id', 'position', name='uq_note_activities_note_position'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', GUID(), primary_key=True),
        sa.Column('recipient_id', GUID(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', GUID(), nullable=False),
        sa.Column('note_id', GUID(), nullable=False),
        sa.Column('type', sa.String(length=40), nullable=False),
        sa.Column('permission', sa.String(length=20), nullable=True),
        sa.Column('read_at', UTCDateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_notifications_recipient_created', 'notifications', ['recipient_id', 'created_at'])
    op.create_index('idx_notifications_note_id', 'notifications', ['note_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications')
    op.drop_table('note_activities')
    op.drop_table('note_shares')
    op.drop_table('notes')
    op.drop_table('users')
