"""Photo model."""
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid

from photovault.db.base import Base
from .base import utcnow


class Photo(Base):
    """Photo metadata. The binary lives in object storage under `s3_key`."""

    __tablename__ = 'photos'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    # Storage info (immutable once set)
    s3_key = Column(String(1024), nullable=False, unique=True, index=True)

    # File metadata
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False, default='image/jpeg')
    file_size = Column(BigInteger, nullable=False, default=0)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    taken_at = Column(DateTime, nullable=True)

    # Additional client-provided metadata (EXIF subset, camera, tags)
    extra_metadata = Column('metadata', JSON, nullable=True)

    uploaded_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # Relationships
    owner = relationship('User', back_populates='photos')

    def __repr__(self) -> str:
        return f'<Photo(id={self.id}, filename={self.filename})>'
