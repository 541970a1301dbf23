"""Unauthenticated album access through a public token."""
from fastapi import APIRouter, Depends

from photovault.api.deps import get_album_service
from photovault.schemas.album import PublicAlbumResponse
from photovault.schemas.common import ApiResponse
from photovault.services.albums import AlbumService


router = APIRouter()


@router.get('/albums/{token}', response_model=ApiResponse[PublicAlbumResponse])
def get_public_album(
    token: str,
    service: AlbumService = Depends(get_album_service)
):
    """Public album view. The token must be 64 hex characters."""
    return ApiResponse(data=service.get_album_by_token(token))
