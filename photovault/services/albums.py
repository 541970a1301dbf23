"""
Album and sharing service.

Every album operation first resolves the caller's access level on the
album (owner, edit grantee, view grantee, public token or none) and
checks it against what the operation needs. A caller without enough
access always gets `NotFoundOrForbidden`, whether or not the album
exists.
"""
import logging
import secrets
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from sqlalchemy.orm import Session

from photovault.app.config import settings
from photovault.app.exceptions import NotFoundOrForbidden, ValidationError
from photovault.models.album import Album, AlbumShare
from photovault.models.base import as_utc_naive, utcnow
from photovault.models.enums import AlbumAccess, SharePermission
from photovault.models.photo import Photo
from photovault.models.user import User
from photovault.repositories.album_repo import AlbumRepository
from photovault.repositories.photo_repo import PhotoRepository
from photovault.repositories.user_repo import UserRepository
from photovault.schemas.album import (
    AddPhotosResult,
    AlbumDetailResponse,
    AlbumListResponse,
    AlbumResponse,
    AlbumShareResponse,
    PublicAlbumResponse,
    PublicLinkResponse,
    SharedAlbumResponse,
)
from photovault.schemas.photo import PhotoResponse, PublicPhotoResponse
from photovault.services.storage.s3 import S3Service
from photovault.utils.validators import (
    clean_description,
    try_parse_uuid,
    validate_public_token,
    validate_title,
)

logger = logging.getLogger(__name__)

PhotoSchema = TypeVar("PhotoSchema", PhotoResponse, PublicPhotoResponse)

ALBUM_NOT_FOUND = "Album not found"

_PERMISSION_ACCESS = {
    SharePermission.edit: AlbumAccess.edit,
    SharePermission.view: AlbumAccess.view,
}


def generate_public_token() -> str:
    """64 lowercase hex characters from 32 random bytes."""
    return secrets.token_hex(32)


def build_public_url(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/album/public/{token}"


class AlbumService:
    """Authorization-scoped album operations."""

    def __init__(self, db: Session, storage: S3Service, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.storage = storage
        self.clock = clock
        self.albums = AlbumRepository(db)
        self.photos = PhotoRepository(db)
        self.users = UserRepository(db)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def resolve_access(self, album: Album, user: Optional[User]) -> AlbumAccess:
        """Access level of `user` on `album`. Shares past their expiry grant nothing."""
        if user is None:
            return AlbumAccess.none
        if album.user_id == user.id:
            return AlbumAccess.owner

        permission = self.albums.get_grantee_permission(
            album.id, user.email, user.username, self.clock()
        )
        if permission is None:
            return AlbumAccess.none
        return _PERMISSION_ACCESS[SharePermission(permission)]

    def _load(self, album_id, user: User, allowed: Iterable[AlbumAccess]) -> Tuple[Album, AlbumAccess]:
        parsed = try_parse_uuid(album_id)
        album = self.albums.get(parsed) if parsed else None
        if album is None:
            raise NotFoundOrForbidden(ALBUM_NOT_FOUND)

        access = self.resolve_access(album, user)
        if access not in allowed:
            logger.info(f"User {user.id} denied on album {album.id} with access {access.value}")
            raise NotFoundOrForbidden(ALBUM_NOT_FOUND)
        return album, access

    def _owned(self, album_id, user: User) -> Album:
        album, _ = self._load(album_id, user, (AlbumAccess.owner,))
        return album

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_album(self, user: User, title: str, description: Optional[str] = None) -> Album:
        album = self.albums.create_album(
            owner_id=user.id,
            title=validate_title(title),
            description=clean_description(description),
        )
        logger.info(f"Album {album.id} created by {user.username}")
        return album

    def list_albums(self, user: User) -> AlbumListResponse:
        """Albums the user owns plus albums shared with them through an unexpired share."""
        owned = self.albums.get_by_owner(user.id)
        shared = self.albums.get_shared_with(user.email, user.username, user.id, self.clock())

        counts = self.albums.get_photo_counts(
            [album.id for album in owned] + [album.id for album, _ in shared]
        )

        return AlbumListResponse(
            owned=[self._summary(album, counts.get(album.id, 0)) for album in owned],
            shared_with_me=[
                SharedAlbumResponse(
                    **self._summary(album, counts.get(album.id, 0)).model_dump(),
                    permission=permission,
                )
                for album, permission in shared
            ],
        )

    def get_album(self, album_id, user: User) -> AlbumDetailResponse:
        album, access = self._load(album_id, user, (AlbumAccess.owner, AlbumAccess.edit, AlbumAccess.view))

        photos = self.albums.get_member_photos(album.id)
        detail = AlbumDetailResponse(
            **self._summary(album, len(photos)).model_dump(),
            access=access,
            photos=self._with_urls(photos, settings.PRIVATE_URL_TTL_SECONDS, PhotoResponse),
        )

        if access is AlbumAccess.owner:
            detail.shares = [AlbumShareResponse.model_validate(share) for share in self.albums.get_shares(album.id)]
            detail.public_token = album.public_token
            detail.public_expires_at = album.public_expires_at

        return detail

    def update_album(self, album_id, user: User, changes: Dict) -> AlbumResponse:
        """
        Apply title, description and cover changes. Owner only.

        Args:
            album_id: Album id
            user: Caller
            changes: Only the fields the client sent; `cover_photo_id=None`
                clears the cover
        """
        album = self._owned(album_id, user)

        updates = {}
        if "title" in changes:
            updates["title"] = validate_title(changes["title"])
        if "description" in changes:
            updates["description"] = clean_description(changes["description"])
        if "cover_photo_id" in changes:
            cover_id = changes["cover_photo_id"]
            if cover_id is not None:
                cover_id = try_parse_uuid(cover_id)
                if cover_id is None or not self.albums.is_member(album.id, cover_id):
                    raise ValidationError("Cover photo must be a photo in the album")
            updates["cover_photo_id"] = cover_id

        if updates:
            album = self.albums.update(album.id, updates)

        return self._summary(album, self.albums.get_photo_counts([album.id])[album.id])

    def delete_album(self, album_id, user: User) -> bool:
        album = self._owned(album_id, user)
        self.albums.delete(album.id)
        logger.info(f"Album {album.id} deleted by {user.username}")
        return True

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_photos_to_album(self, album_id, photo_ids: List[str], user: User) -> AddPhotosResult:
        """
        Add photos one by one. A photo is skipped when it does not exist,
        is not owned by the album owner, or is already in the album.
        """
        album, _ = self._load(album_id, user, (AlbumAccess.owner, AlbumAccess.edit))
        owner_id = album.user_id

        added = 0
        for raw_id in photo_ids:
            photo_id = try_parse_uuid(raw_id)
            photo = self.photos.get(photo_id) if photo_id else None
            if photo is None or photo.user_id != owner_id:
                continue
            if self.albums.add_photo(album.id, photo.id):
                added += 1

        result = AddPhotosResult(total=len(photo_ids), added=added, skipped=len(photo_ids) - added)
        logger.info(f"Album {album.id}: added {result.added}, skipped {result.skipped}")
        return result

    def remove_photo_from_album(self, album_id, photo_id, user: User) -> bool:
        album, _ = self._load(album_id, user, (AlbumAccess.owner, AlbumAccess.edit))
        parsed = try_parse_uuid(photo_id)
        if parsed is None or not self.albums.remove_photo(album.id, parsed):
            raise NotFoundOrForbidden("Photo not in album")
        return True

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def share_album(
        self,
        album_id,
        user: User,
        email: Optional[str] = None,
        username: Optional[str] = None,
        permission=SharePermission.view,
        expires_at: Optional[datetime] = None,
    ) -> AlbumShare:
        """
        Grant view or edit access to one grantee. Owner only.

        A username must belong to an existing user. An email may belong to
        someone who has not signed up yet; the share applies once they do.
        """
        album = self._owned(album_id, user)

        email = (email or "").strip() or None
        username = (username or "").strip() or None
        if bool(email) == bool(username):
            raise ValidationError("Provide exactly one of email or username")

        try:
            permission = SharePermission(permission)
        except ValueError:
            raise ValidationError("Permission must be 'view' or 'edit'")

        if username:
            grantee = self.users.get_by_username(username)
            if grantee is None:
                raise ValidationError(f"User '{username}' not found")
            if grantee.id == album.user_id:
                raise ValidationError("Album is already owned by this user")
        elif email.lower() == (user.email or "").lower():
            raise ValidationError("Album is already owned by this user")

        share = self.albums.upsert_share(
            album.id,
            permission,
            email=email,
            username=username,
            expires_at=as_utc_naive(expires_at),
        )
        logger.info(f"Album {album.id} shared with {email or username} ({permission.value})")
        return share

    def generate_public_token(self, album_id, user: User, expires_at: Optional[datetime] = None) -> PublicLinkResponse:
        """Issue a fresh public token, replacing any previous one. Owner only."""
        album = self._owned(album_id, user)
        token = generate_public_token()
        album = self.albums.set_public_token(album, token, as_utc_naive(expires_at))
        logger.info(f"Public link issued for album {album.id}")
        return PublicLinkResponse(
            public_token=token,
            public_url=build_public_url(token),
            expires_at=album.public_expires_at,
        )

    def revoke_public_access(self, album_id, user: User) -> bool:
        album = self._owned(album_id, user)
        self.albums.clear_public_token(album)
        logger.info(f"Public link revoked for album {album.id}")
        return True

    def get_album_by_token(self, token: str) -> PublicAlbumResponse:
        """Unauthenticated read through a public token. Returns the public projection only."""
        token = validate_public_token(token)

        album = self.albums.get_by_public_token(token)
        if album is None:
            raise NotFoundOrForbidden(ALBUM_NOT_FOUND)
        if album.public_expires_at is not None and self.clock() >= album.public_expires_at:
            logger.info(f"Expired public link used for album {album.id}")
            raise NotFoundOrForbidden(ALBUM_NOT_FOUND)

        photos = self.albums.get_member_photos(album.id)
        return PublicAlbumResponse(
            id=album.id,
            title=album.title,
            description=album.description,
            created_at=album.created_at,
            photos=self._with_urls(photos, settings.PUBLIC_URL_TTL_SECONDS, PublicPhotoResponse),
            photo_count=len(photos),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _summary(album: Album, photo_count: int) -> AlbumResponse:
        return AlbumResponse(
            id=album.id,
            user_id=album.user_id,
            title=album.title,
            description=album.description,
            cover_photo_id=album.cover_photo_id,
            is_public=album.is_public,
            photo_count=photo_count,
            created_at=album.created_at,
            updated_at=album.updated_at,
        )

    def _with_urls(self, photos: List[Photo], ttl: int, schema: Type[PhotoSchema]) -> List[PhotoSchema]:
        if not photos:
            return []
        urls = {
            item["key"]: item["url"]
            for item in self.storage.issue_batch_download_urls([photo.s3_key for photo in photos], ttl)
        }
        return [
            schema.model_validate(photo).model_copy(update={"download_url": urls.get(photo.s3_key)})
            for photo in photos
        ]
