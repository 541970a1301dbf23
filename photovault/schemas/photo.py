"""Photo schemas."""
from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from uuid import UUID
from typing import Optional, Any, List


class PublicPhotoResponse(BaseModel):
    """Photo as shown through a public link: no owner or storage key."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    filename: str
    original_name: str
    mime_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    taken_at: Optional[datetime] = None
    uploaded_at: datetime
    download_url: Optional[str] = None


class PhotoResponse(PublicPhotoResponse):
    """Photo as shown to its owner and to album grantees."""
    user_id: UUID
    s3_key: str
    metadata: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("extra_metadata", "metadata"),
        serialization_alias="metadata",
    )


class PhotoListResponse(BaseModel):
    photos: List[PhotoResponse]
    total: int
    limit: int
    offset: int


class UploadUrlRequest(BaseModel):
    """Intent to upload one photo."""
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., description="MIME type of the file")
    file_size: int = Field(..., gt=0, description="Size in bytes")
    width: Optional[int] = Field(None, gt=0)
    height: Optional[int] = Field(None, gt=0)
    taken_at: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None

    @field_validator('content_type')
    @classmethod
    def normalize_content_type(cls, v: str) -> str:
        return v.strip().lower()


class UploadUrlResponse(BaseModel):
    upload_url: str
    s3_key: str
    expires_in: int
    photo: PhotoResponse


class DownloadUrlResponse(BaseModel):
    photo_id: UUID
    download_url: str
    expires_in: int


class RefreshUrlsRequest(BaseModel):
    photo_ids: List[UUID] = Field(..., max_length=500)


class RefreshedUrl(BaseModel):
    photo_id: UUID
    download_url: Optional[str] = None


class RefreshUrlsResponse(BaseModel):
    urls: List[RefreshedUrl]
    expires_in: int


class PhotoStatsResponse(BaseModel):
    total_photos: int
    total_size: int
    first_upload: Optional[datetime] = None
    last_upload: Optional[datetime] = None
