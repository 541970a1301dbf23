"""Album API endpoints."""
from fastapi import APIRouter, Depends, status, Body
from typing import Optional
import qrcode
from io import BytesIO
import base64

from photovault.api.deps import get_current_user, get_album_service
from photovault.models.user import User
from photovault.schemas.album import (
    AlbumCreate,
    AlbumUpdate,
    AlbumResponse,
    AlbumDetailResponse,
    AlbumListResponse,
    AlbumShareResponse,
    AddPhotosRequest,
    AddPhotosResult,
    ShareAlbumRequest,
    PublicLinkRequest,
    PublicLinkResponse,
)
from photovault.schemas.common import ApiResponse
from photovault.services.albums import AlbumService


router = APIRouter()


def build_qr_code(url: str) -> str:
    """PNG QR code for `url` as a base64 data URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4
    )
    qr.add_data(url)
    qr.make(fit=True)

    img = qr.make_image(fill_color='black', back_color='white')
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode()}"


@router.get('', response_model=ApiResponse[AlbumListResponse])
def list_albums(
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """List albums the caller owns and albums shared with them."""
    return ApiResponse(data=service.list_albums(current_user))


@router.post('', response_model=ApiResponse[AlbumResponse], status_code=status.HTTP_201_CREATED)
def create_album(
    album_data: AlbumCreate,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """
    Create new album.

    - **title**: Album title (required, non-blank)
    - **description**: Optional description
    """
    album = service.create_album(current_user, album_data.title, album_data.description)
    return ApiResponse(data=AlbumResponse.model_validate(album))


@router.get('/{album_id}', response_model=ApiResponse[AlbumDetailResponse])
def get_album(
    album_id: str,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """
    Get album with its photos and short-lived download URLs.

    Visible to the owner and to grantees with an unexpired share.
    """
    return ApiResponse(data=service.get_album(album_id, current_user))


@router.put('/{album_id}', response_model=ApiResponse[AlbumResponse])
def update_album(
    album_id: str,
    album_data: AlbumUpdate,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """Update title, description or cover photo (owner only)."""
    changes = album_data.model_dump(exclude_unset=True)
    return ApiResponse(data=service.update_album(album_id, current_user, changes))


@router.delete('/{album_id}', response_model=ApiResponse[dict])
def delete_album(
    album_id: str,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """Delete album (owner only). Photos themselves are kept."""
    service.delete_album(album_id, current_user)
    return ApiResponse(data={'album_id': album_id, 'deleted': True})


@router.post('/{album_id}/photos', response_model=ApiResponse[AddPhotosResult])
def add_photos(
    album_id: str,
    request: AddPhotosRequest,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """
    Add photos to album (owner or edit grantee).

    Photos that do not exist, belong to someone other than the album
    owner, or are already in the album are counted as skipped.
    """
    return ApiResponse(data=service.add_photos_to_album(album_id, request.photo_ids, current_user))


@router.delete('/{album_id}/photos/{photo_id}', response_model=ApiResponse[dict])
def remove_photo(
    album_id: str,
    photo_id: str,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """Remove one photo from album (owner or edit grantee)."""
    service.remove_photo_from_album(album_id, photo_id, current_user)
    return ApiResponse(data={'album_id': album_id, 'photo_id': photo_id, 'removed': True})


@router.post('/{album_id}/share', response_model=ApiResponse[AlbumShareResponse])
def share_album(
    album_id: str,
    request: ShareAlbumRequest,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """
    Share album with one user (owner only).

    - **email** or **username**: exactly one grantee
    - **permission**: `view` or `edit`
    - **expires_at**: optional end of access
    """
    share = service.share_album(
        album_id,
        current_user,
        email=request.email,
        username=request.username,
        permission=request.permission,
        expires_at=request.expires_at,
    )
    return ApiResponse(data=AlbumShareResponse.model_validate(share))


@router.post('/{album_id}/public', response_model=ApiResponse[PublicLinkResponse])
def generate_public_link(
    album_id: str,
    request: Optional[PublicLinkRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """
    Generate a public link and QR code for album (owner only).

    Every call issues a new token; the previous link stops working.
    """
    expires_at = request.expires_at if request else None
    link = service.generate_public_token(album_id, current_user, expires_at)
    link.qr_code = build_qr_code(link.public_url)
    return ApiResponse(data=link)


@router.delete('/{album_id}/public', response_model=ApiResponse[dict])
def revoke_public_link(
    album_id: str,
    current_user: User = Depends(get_current_user),
    service: AlbumService = Depends(get_album_service)
):
    """Revoke the public link (owner only)."""
    service.revoke_public_access(album_id, current_user)
    return ApiResponse(data={'album_id': album_id, 'is_public': False})
