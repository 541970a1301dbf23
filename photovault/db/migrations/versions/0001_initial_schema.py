"""initial schema: users, photos, albums, memberships and shares

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('auth_provider_id', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('profile', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_auth_provider_id', 'users', ['auth_provider_id'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'photos',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('s3_key', sa.String(length=1024), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('taken_at', sa.DateTime(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_photos_user_id', 'photos', ['user_id'])
    op.create_index('ix_photos_s3_key', 'photos', ['s3_key'], unique=True)
    op.create_index('ix_photos_uploaded_at', 'photos', ['uploaded_at'])

    op.create_table(
        'albums',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cover_photo_id', sa.Uuid(), sa.ForeignKey('photos.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('public_token', sa.String(length=64), nullable=True),
        sa.Column('public_expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_albums_user_id', 'albums', ['user_id'])
    op.create_index('ix_albums_public_token', 'albums', ['public_token'], unique=True)
    op.create_index('ix_albums_created_at', 'albums', ['created_at'])

    op.create_table(
        'album_photos',
        sa.Column('album_id', sa.Uuid(), sa.ForeignKey('albums.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('photo_id', sa.Uuid(), sa.ForeignKey('photos.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('added_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_album_photos_photo_id', 'album_photos', ['photo_id'])

    share_permission = sa.Enum('view', 'edit', name='share_permission')
    op.create_table(
        'album_shares',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('album_id', sa.Uuid(), sa.ForeignKey('albums.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('permission', share_permission, nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('shared_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('album_id', 'email', name='uq_album_shares_album_email'),
        sa.UniqueConstraint('album_id', 'username', name='uq_album_shares_album_username'),
    )
    op.create_index('ix_album_shares_album_id', 'album_shares', ['album_id'])
    op.create_index('ix_album_shares_email', 'album_shares', ['email'])
    op.create_index('ix_album_shares_username', 'album_shares', ['username'])


def downgrade() -> None:
    op.drop_table('album_shares')
    sa.Enum(name='share_permission').drop(op.get_bind(), checkfirst=True)
    op.drop_table('album_photos')
    op.drop_table('albums')
    op.drop_table('photos')
    op.drop_table('users')
