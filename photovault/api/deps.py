"""Dependencies for API endpoints."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from photovault.app.exceptions import Unauthenticated
from photovault.core.security import TokenVerifier, build_token_verifier
from photovault.db.base import get_db
from photovault.models.user import User
from photovault.services.albums import AlbumService
from photovault.services.identity import IdentityService
from photovault.services.photos import PhotoService
from photovault.services.storage.s3 import S3Service

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_verifier() -> TokenVerifier:
    """Process-wide verifier so the key set cache is shared across requests."""
    return build_token_verifier()


@lru_cache
def get_storage() -> S3Service:
    return S3Service()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: Session = Depends(get_db)
) -> User:
    """Verify the bearer token and resolve it to a local user."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("Missing bearer token")

    token = credentials.credentials
    claims = verifier.verify(token)
    if not claims.get("sub"):
        raise Unauthenticated("Token has no subject")

    return IdentityService(db, verifier).resolve(token, claims)


def get_album_service(
    db: Session = Depends(get_db),
    storage: S3Service = Depends(get_storage)
) -> AlbumService:
    return AlbumService(db, storage)


def get_photo_service(
    db: Session = Depends(get_db),
    storage: S3Service = Depends(get_storage)
) -> PhotoService:
    return PhotoService(db, storage)
