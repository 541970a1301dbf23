"""Photo library: upload intents, listings, download URLs and deletion."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from photovault.app.config import settings
from photovault.app.exceptions import NotFoundOrForbidden, UpstreamUnavailable
from photovault.models.base import as_utc_naive
from photovault.models.photo import Photo
from photovault.models.user import User
from photovault.repositories.photo_repo import PhotoRepository
from photovault.schemas.photo import (
    DownloadUrlResponse,
    PhotoListResponse,
    PhotoResponse,
    PhotoStatsResponse,
    RefreshedUrl,
    RefreshUrlsResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from photovault.services.storage.s3 import S3Service, S3ServiceError
from photovault.utils.validators import try_parse_uuid, validate_upload, validate_year_month

logger = logging.getLogger(__name__)

PHOTO_NOT_FOUND = "Photo not found"


def month_range(year: int, month: Optional[int]):
    """[start, end) covering a whole year or a single month."""
    if month is None:
        return datetime(year, 1, 1), datetime(year + 1, 1, 1)
    if month == 12:
        return datetime(year, 12, 1), datetime(year + 1, 1, 1)
    return datetime(year, month, 1), datetime(year, month + 1, 1)


class PhotoService:
    """Operations on the caller's own photos."""

    def __init__(self, db: Session, storage: S3Service):
        self.db = db
        self.storage = storage
        self.photos = PhotoRepository(db)

    def request_upload(self, user: User, request: UploadUrlRequest) -> UploadUrlResponse:
        """
        Create the photo record and a presigned PUT URL for its object.

        The record exists as soon as the URL is issued; the client uploads
        straight to storage afterwards.
        """
        validate_upload(request.content_type, request.file_size)

        s3_key = self.storage.generate_s3_key(user.username, request.file_name)
        upload_url = self.storage.issue_upload_url(
            s3_key, request.content_type, settings.UPLOAD_URL_TTL_SECONDS
        )

        photo = self.photos.create_photo(
            user_id=user.id,
            s3_key=s3_key,
            filename=s3_key.rsplit("/", 1)[-1],
            original_name=request.file_name,
            mime_type=request.content_type,
            file_size=request.file_size,
            width=request.width,
            height=request.height,
            taken_at=as_utc_naive(request.taken_at),
            extra_metadata=request.metadata,
        )
        logger.info(f"Upload URL issued for photo {photo.id} ({s3_key})")

        return UploadUrlResponse(
            upload_url=upload_url,
            s3_key=s3_key,
            expires_in=settings.UPLOAD_URL_TTL_SECONDS,
            photo=PhotoResponse.model_validate(photo),
        )

    def list_photos(
        self,
        user: User,
        year: Optional[int] = None,
        month: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> PhotoListResponse:
        validate_year_month(year, month)

        if year is not None:
            start, end = month_range(year, month)
            photos, total = self.photos.get_by_date_range(user.id, start, end, skip=offset, limit=limit)
        else:
            photos, total = self.photos.get_by_owner(user.id, skip=offset, limit=limit)

        return PhotoListResponse(
            photos=self._with_urls(photos),
            total=total,
            limit=limit,
            offset=offset,
        )

    def get_download_url(self, user: User, photo_id) -> DownloadUrlResponse:
        photo = self._owned(user, photo_id)
        url = self.storage.issue_download_url(photo.s3_key, settings.PRIVATE_URL_TTL_SECONDS)
        return DownloadUrlResponse(
            photo_id=photo.id,
            download_url=url,
            expires_in=settings.PRIVATE_URL_TTL_SECONDS,
        )

    def refresh_urls(self, user: User, photo_ids: List) -> RefreshUrlsResponse:
        """Fresh download URLs for the caller's photos. Unknown or foreign ids are left out."""
        photos = self.photos.get_many_owned(photo_ids, user.id)
        urls = self._url_map(photos)
        return RefreshUrlsResponse(
            urls=[RefreshedUrl(photo_id=photo.id, download_url=urls.get(photo.s3_key)) for photo in photos],
            expires_in=settings.PRIVATE_URL_TTL_SECONDS,
        )

    def delete_photo(self, user: User, photo_id) -> bool:
        """
        Delete metadata first, then the stored object.

        A metadata failure aborts before storage is touched. A storage
        failure after the metadata is gone only leaves an orphaned object,
        so it is logged and the call still succeeds.
        """
        photo = self._owned(user, photo_id)
        s3_key = photo.s3_key

        try:
            self.photos.delete_photo(photo)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable("Failed to delete photo", detail=str(e))

        try:
            self.storage.delete_object(s3_key)
        except S3ServiceError as e:
            logger.warning(f"Photo {photo_id} deleted but object {s3_key} remains: {e.detail}")

        return True

    def stats(self, user: User) -> PhotoStatsResponse:
        return PhotoStatsResponse(**self.photos.get_user_stats(user.id))

    def _owned(self, user: User, photo_id) -> Photo:
        parsed = try_parse_uuid(photo_id)
        photo = self.photos.get_owned(parsed, user.id) if parsed else None
        if photo is None:
            raise NotFoundOrForbidden(PHOTO_NOT_FOUND)
        return photo

    def _url_map(self, photos: List[Photo]) -> dict:
        if not photos:
            return {}
        return {
            item["key"]: item["url"]
            for item in self.storage.issue_batch_download_urls(
                [photo.s3_key for photo in photos], settings.PRIVATE_URL_TTL_SECONDS
            )
        }

    def _with_urls(self, photos: List[Photo]) -> List[PhotoResponse]:
        urls = self._url_map(photos)
        return [
            PhotoResponse.model_validate(photo).model_copy(update={"download_url": urls.get(photo.s3_key)})
            for photo in photos
        ]
