"""Import all models for Alembic."""
from .base import TimestampMixin, utcnow, as_utc_naive
from .enums import SharePermission, AlbumAccess
from .user import User
from .photo import Photo
from .album import Album, AlbumPhoto, AlbumShare

__all__ = [
    "TimestampMixin",
    "utcnow",
    "as_utc_naive",
    "SharePermission",
    "AlbumAccess",
    "User",
    "Photo",
    "Album",
    "AlbumPhoto",
    "AlbumShare",
]
