"""Album repository extending base repository."""
from sqlalchemy.orm import Session
from sqlalchemy import func, and_, or_, desc, insert
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Tuple, Dict
from uuid import UUID
from datetime import datetime
import logging

from photovault.repositories.base import BaseRepository
from photovault.models.album import Album, AlbumPhoto, AlbumShare
from photovault.models.base import utcnow
from photovault.models.enums import SharePermission
from photovault.models.photo import Photo

logger = logging.getLogger(__name__)


def _active_share_filter(now: datetime):
    return or_(AlbumShare.expires_at.is_(None), AlbumShare.expires_at > now)


def _grantee_filter(email: Optional[str], username: Optional[str]):
    conditions = []
    if email:
        conditions.append(AlbumShare.email == email)
    if username:
        conditions.append(AlbumShare.username == username)
    return or_(*conditions)


def _strongest(permissions) -> SharePermission:
    return SharePermission.edit if SharePermission.edit in permissions else SharePermission.view


class AlbumRepository(BaseRepository[Album]):
    """Repository for album, membership and share operations."""

    def __init__(self, db: Session):
        super().__init__(Album, db)

    def create_album(self, owner_id: UUID, title: str, description: Optional[str]) -> Album:
        return self.create({
            'user_id': owner_id,
            'title': title,
            'description': description,
            'is_public': False,
        })

    def get_by_owner(self, owner_id: UUID) -> List[Album]:
        """Albums owned by a user, newest first."""
        return self.db.query(Album).filter(
            Album.user_id == owner_id
        ).order_by(desc(Album.created_at)).all()

    def get_by_public_token(self, token: str) -> Optional[Album]:
        return self.db.query(Album).filter(
            Album.public_token == token,
            Album.is_public.is_(True)
        ).first()

    # ------------------------------------------------------------------
    # Shares
    # ------------------------------------------------------------------

    def get_shared_with(
        self,
        email: Optional[str],
        username: Optional[str],
        exclude_owner_id: UUID,
        now: datetime
    ) -> List[Tuple[Album, SharePermission]]:
        """
        Albums shared with a grantee through an unexpired share.

        A grantee matched by both email and username gets the stronger of
        the two permissions. Albums the grantee owns are excluded.

        Args:
            email: Grantee email
            username: Grantee username
            exclude_owner_id: Caller's user id
            now: Reference time for share expiry

        Returns:
            List of (album, permission), newest album first
        """
        if not email and not username:
            return []

        rows = self.db.query(Album, AlbumShare.permission).join(
            AlbumShare, AlbumShare.album_id == Album.id
        ).filter(
            _grantee_filter(email, username),
            _active_share_filter(now),
            Album.user_id != exclude_owner_id
        ).order_by(desc(Album.created_at)).all()

        permissions: Dict[UUID, List[SharePermission]] = {}
        albums: List[Album] = []
        for album, permission in rows:
            if album.id not in permissions:
                permissions[album.id] = []
                albums.append(album)
            permissions[album.id].append(permission)

        return [(album, _strongest(permissions[album.id])) for album in albums]

    def get_grantee_permission(
        self,
        album_id: UUID,
        email: Optional[str],
        username: Optional[str],
        now: datetime
    ) -> Optional[SharePermission]:
        """Strongest unexpired permission a grantee holds on an album, if any."""
        if not email and not username:
            return None

        permissions = [
            row.permission for row in self.db.query(AlbumShare.permission).filter(
                AlbumShare.album_id == album_id,
                _grantee_filter(email, username),
                _active_share_filter(now)
            ).all()
        ]
        if not permissions:
            return None
        return _strongest(permissions)

    def get_shares(self, album_id: UUID) -> List[AlbumShare]:
        return self.db.query(AlbumShare).filter(
            AlbumShare.album_id == album_id
        ).order_by(AlbumShare.shared_at).all()

    def upsert_share(
        self,
        album_id: UUID,
        permission: SharePermission,
        email: Optional[str] = None,
        username: Optional[str] = None,
        expires_at: Optional[datetime] = None
    ) -> AlbumShare:
        """
        Grant access to one grantee. Re-sharing to the same grantee
        replaces the previous permission and expiry.

        Args:
            album_id: Album UUID
            permission: view or edit
            email: Grantee email (exclusive with username)
            username: Grantee username (exclusive with email)
            expires_at: Optional naive-UTC expiry

        Returns:
            The stored share
        """
        if email:
            match = and_(AlbumShare.album_id == album_id, AlbumShare.email == email)
        else:
            match = and_(AlbumShare.album_id == album_id, AlbumShare.username == username)

        share = self.db.query(AlbumShare).filter(match).first()
        if share is None:
            share = AlbumShare(album_id=album_id, email=email, username=username)
            self.db.add(share)

        share.permission = permission
        share.expires_at = expires_at
        share.shared_at = utcnow()

        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent share to the same grantee; latest write wins
            self.db.rollback()
            share = self.db.query(AlbumShare).filter(match).one()
            share.permission = permission
            share.expires_at = expires_at
            self.db.commit()

        self.db.refresh(share)
        return share

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def is_member(self, album_id: UUID, photo_id: UUID) -> bool:
        query = self.db.query(AlbumPhoto).filter(
            AlbumPhoto.album_id == album_id,
            AlbumPhoto.photo_id == photo_id
        )
        return self.db.query(query.exists()).scalar()

    def add_photo(self, album_id: UUID, photo_id: UUID) -> bool:
        """
        Insert one membership row.

        Returns:
            True if the photo was added, False if it was already a member
        """
        statement = insert(AlbumPhoto).values(album_id=album_id, photo_id=photo_id, added_at=utcnow())
        try:
            self.db.execute(statement)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.debug(f"Photo {photo_id} already in album {album_id}")
            return False
        return True

    def remove_photo(self, album_id: UUID, photo_id: UUID) -> bool:
        """
        Delete one membership row, clearing the cover if it pointed at the photo.

        Returns:
            True if a row was removed
        """
        removed = self.db.query(AlbumPhoto).filter(
            AlbumPhoto.album_id == album_id,
            AlbumPhoto.photo_id == photo_id
        ).delete(synchronize_session=False)

        if removed:
            self.db.query(Album).filter(
                Album.id == album_id,
                Album.cover_photo_id == photo_id
            ).update({Album.cover_photo_id: None}, synchronize_session=False)

        self.db.commit()
        return bool(removed)

    def get_member_photos(self, album_id: UUID) -> List[Photo]:
        """Photos in an album, newest upload first."""
        return self.db.query(Photo).join(
            AlbumPhoto, AlbumPhoto.photo_id == Photo.id
        ).filter(
            AlbumPhoto.album_id == album_id
        ).order_by(desc(Photo.uploaded_at)).all()

    def get_photo_counts(self, album_ids: List[UUID]) -> Dict[UUID, int]:
        if not album_ids:
            return {}
        rows = self.db.query(
            AlbumPhoto.album_id, func.count(AlbumPhoto.photo_id)
        ).filter(
            AlbumPhoto.album_id.in_(album_ids)
        ).group_by(AlbumPhoto.album_id).all()
        counts = {album_id: 0 for album_id in album_ids}
        counts.update({album_id: count for album_id, count in rows})
        return counts

    # ------------------------------------------------------------------
    # Public link
    # ------------------------------------------------------------------

    def set_public_token(self, album: Album, token: str, expires_at: Optional[datetime]) -> Album:
        album.public_token = token
        album.public_expires_at = expires_at
        album.is_public = True
        self.db.commit()
        self.db.refresh(album)
        return album

    def clear_public_token(self, album: Album) -> Album:
        album.public_token = None
        album.public_expires_at = None
        album.is_public = False
        self.db.commit()
        self.db.refresh(album)
        return album
