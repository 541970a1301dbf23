"""User model."""
from sqlalchemy import Column, String, Boolean, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid

from photovault.db.base import Base
from .base import TimestampMixin


class User(Base, TimestampMixin):
    """Account mirrored from the identity provider on first sign-in."""

    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    auth_provider_id = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    email_verified = Column(Boolean, default=False, nullable=False)

    # Free-form profile sub-document (names, bio, links, preferences)
    profile = Column(JSON, nullable=False, default=dict)

    # Relationships
    photos = relationship('Photo', back_populates='owner', cascade='all, delete-orphan')
    albums = relationship('Album', back_populates='owner', cascade='all, delete-orphan')

    def __repr__(self) -> str:
        return f'<User(id={self.id}, username={self.username})>'
