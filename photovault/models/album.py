"""Album, membership and share models."""
from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Text, Uuid, UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
import uuid

from photovault.db.base import Base
from .base import TimestampMixin, utcnow
from .enums import SharePermission


class Album(Base, TimestampMixin):
    """A named collection of photos owned by one user."""

    __tablename__ = 'albums'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cover_photo_id = Column(Uuid, ForeignKey('photos.id', ondelete='SET NULL'), nullable=True)

    # Public link
    is_public = Column(Boolean, default=False, nullable=False)
    public_token = Column(String(64), unique=True, nullable=True, index=True)
    public_expires_at = Column(DateTime, nullable=True)

    # Relationships
    owner = relationship('User', back_populates='albums')
    memberships = relationship('AlbumPhoto', back_populates='album', cascade='all, delete-orphan', passive_deletes=True)
    shares = relationship('AlbumShare', back_populates='album', cascade='all, delete-orphan', passive_deletes=True)

    def __repr__(self) -> str:
        return f'<Album(id={self.id}, title={self.title})>'


class AlbumPhoto(Base):
    """Membership of one photo in one album."""

    __tablename__ = 'album_photos'

    album_id = Column(Uuid, ForeignKey('albums.id', ondelete='CASCADE'), primary_key=True)
    photo_id = Column(Uuid, ForeignKey('photos.id', ondelete='CASCADE'), primary_key=True, index=True)
    added_at = Column(DateTime, default=utcnow, nullable=False)

    album = relationship('Album', back_populates='memberships')
    photo = relationship('Photo')

    def __repr__(self) -> str:
        return f'<AlbumPhoto(album_id={self.album_id}, photo_id={self.photo_id})>'


class AlbumShare(Base):
    """Grant of view or edit access to one grantee, addressed by email or username."""

    __tablename__ = 'album_shares'
    __table_args__ = (
        UniqueConstraint('album_id', 'email', name='uq_album_shares_album_email'),
        UniqueConstraint('album_id', 'username', name='uq_album_shares_album_username'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    album_id = Column(Uuid, ForeignKey('albums.id', ondelete='CASCADE'), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    username = Column(String(100), nullable=True, index=True)
    permission = Column(SQLEnum(SharePermission, name='share_permission'), default=SharePermission.view, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    shared_at = Column(DateTime, default=utcnow, nullable=False)

    album = relationship('Album', back_populates='shares')

    def __repr__(self) -> str:
        return f'<AlbumShare(album_id={self.album_id}, grantee={self.email or self.username}, permission={self.permission})>'
