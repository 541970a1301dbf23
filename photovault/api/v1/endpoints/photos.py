"""Photo API endpoints."""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from photovault.api.deps import get_current_user, get_photo_service
from photovault.models.user import User
from photovault.schemas.common import ApiResponse
from photovault.schemas.photo import (
    DownloadUrlResponse,
    PhotoListResponse,
    PhotoStatsResponse,
    RefreshUrlsRequest,
    RefreshUrlsResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from photovault.services.photos import PhotoService


router = APIRouter()


@router.get('', response_model=ApiResponse[PhotoListResponse])
def list_photos(
    year: Optional[int] = Query(None, description='Only photos uploaded in this year'),
    month: Optional[int] = Query(None, description='Only photos uploaded in this month (requires year)'),
    limit: int = Query(50, ge=1, le=200, description='Page size'),
    offset: int = Query(0, ge=0, description='Records to skip'),
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """List the caller's photos, newest first, with download URLs."""
    return ApiResponse(data=service.list_photos(current_user, year=year, month=month, limit=limit, offset=offset))


@router.get('/stats', response_model=ApiResponse[PhotoStatsResponse])
def photo_stats(
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """Photo count, total bytes and first/last upload time."""
    return ApiResponse(data=service.stats(current_user))


@router.post('/upload-url', response_model=ApiResponse[UploadUrlResponse], status_code=status.HTTP_201_CREATED)
def request_upload_url(
    request: UploadUrlRequest,
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """
    Get a presigned PUT URL for one photo.

    - **file_name**: Original file name
    - **content_type**: MIME type (jpeg, png, webp, gif, heic)
    - **file_size**: Size in bytes

    The photo record is created immediately.
    """
    return ApiResponse(data=service.request_upload(current_user, request))


@router.post('/refresh-urls', response_model=ApiResponse[RefreshUrlsResponse])
def refresh_urls(
    request: RefreshUrlsRequest,
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """Re-issue download URLs for photos whose links expired."""
    return ApiResponse(data=service.refresh_urls(current_user, request.photo_ids))


@router.get('/{photo_id}/download', response_model=ApiResponse[DownloadUrlResponse])
def download_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """Download URL for one of the caller's photos."""
    return ApiResponse(data=service.get_download_url(current_user, photo_id))


@router.delete('/{photo_id}', response_model=ApiResponse[dict])
def delete_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    service: PhotoService = Depends(get_photo_service)
):
    """Delete photo metadata and its stored object."""
    service.delete_photo(current_user, photo_id)
    return ApiResponse(data={'photo_id': photo_id, 'deleted': True})
