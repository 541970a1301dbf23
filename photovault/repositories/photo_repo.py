"""Photo repository extending base repository."""
from sqlalchemy.orm import Session
from sqlalchemy import func, desc
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List, Tuple, Dict, Any, Iterable
from uuid import UUID
from datetime import datetime
import logging

from photovault.repositories.base import BaseRepository
from photovault.models.photo import Photo
from photovault.models.album import Album, AlbumPhoto

logger = logging.getLogger(__name__)


class PhotoRepository(BaseRepository[Photo]):
    """Repository for photo database operations."""

    def __init__(self, db: Session):
        super().__init__(Photo, db)

    def create_photo(self, user_id: UUID, s3_key: str, filename: str, **fields: Any) -> Photo:
        """
        Create photo metadata for an object about to be uploaded.

        Args:
            user_id: Owner UUID
            s3_key: Object key in the bucket
            filename: Generated object file name
            **fields: original_name, mime_type, file_size, width, height,
                taken_at, extra_metadata

        Returns:
            Created Photo instance
        """
        return self.create({
            'user_id': user_id,
            's3_key': s3_key,
            'filename': filename,
            **fields,
        })

    def get_owned(self, photo_id: UUID, user_id: UUID) -> Optional[Photo]:
        """Get a photo only if it belongs to the given user."""
        return self.db.query(Photo).filter(
            Photo.id == photo_id,
            Photo.user_id == user_id
        ).first()

    def get_many_owned(self, photo_ids: Iterable[UUID], user_id: UUID) -> List[Photo]:
        ids = list(photo_ids)
        if not ids:
            return []
        return self.db.query(Photo).filter(
            Photo.id.in_(ids),
            Photo.user_id == user_id
        ).order_by(desc(Photo.uploaded_at)).all()

    def get_by_owner(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Photo], int]:
        """
        Get a user's photos, newest upload first.

        Args:
            user_id: Owner UUID
            skip: Records to skip
            limit: Maximum records

        Returns:
            Tuple of (photos list, total count)
        """
        query = self.db.query(Photo).filter(Photo.user_id == user_id)
        total = query.count()
        photos = query.order_by(desc(Photo.uploaded_at)).offset(skip).limit(limit).all()
        return photos, total

    def get_by_date_range(
        self,
        user_id: UUID,
        start_date: datetime,
        end_date: datetime,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[Photo], int]:
        """
        Get a user's photos uploaded within [start_date, end_date).

        Args:
            user_id: Owner UUID
            start_date: Range start (inclusive)
            end_date: Range end (exclusive)
            skip: Records to skip
            limit: Maximum records

        Returns:
            Tuple of (photos list, total count)
        """
        query = self.db.query(Photo).filter(
            Photo.user_id == user_id,
            Photo.uploaded_at >= start_date,
            Photo.uploaded_at < end_date
        )

        total = query.count()
        photos = query.order_by(desc(Photo.uploaded_at)).offset(skip).limit(limit).all()

        return photos, total

    def get_user_stats(self, user_id: UUID) -> Dict[str, Any]:
        """
        Aggregate photo statistics for one user.

        Returns:
            Dict with total_photos, total_size, first_upload, last_upload
        """
        total_photos, total_size, first_upload, last_upload = self.db.query(
            func.count(Photo.id),
            func.coalesce(func.sum(Photo.file_size), 0),
            func.min(Photo.uploaded_at),
            func.max(Photo.uploaded_at)
        ).filter(Photo.user_id == user_id).one()

        return {
            'total_photos': total_photos or 0,
            'total_size': int(total_size or 0),
            'first_upload': first_upload,
            'last_upload': last_upload,
        }

    def delete_photo(self, photo: Photo) -> None:
        """
        Delete photo metadata together with its album memberships and
        any album cover pointing at it, in one transaction.

        Raises:
            SQLAlchemyError: the transaction was rolled back
        """
        try:
            self.db.query(AlbumPhoto).filter(
                AlbumPhoto.photo_id == photo.id
            ).delete(synchronize_session=False)
            self.db.query(Album).filter(
                Album.cover_photo_id == photo.id
            ).update({Album.cover_photo_id: None}, synchronize_session=False)
            self.db.delete(photo)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete photo metadata {photo.id}")
            raise
