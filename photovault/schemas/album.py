"""Album schemas."""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, TypeAdapter, field_validator
from datetime import datetime
from uuid import UUID
from typing import Optional, List

from photovault.models.enums import SharePermission, AlbumAccess
from photovault.schemas.photo import PhotoResponse, PublicPhotoResponse

_email_adapter = TypeAdapter(EmailStr)


class AlbumCreate(BaseModel):
    """Schema for creating an album."""
    title: str = Field(..., max_length=255, description="Album title")
    description: Optional[str] = Field(None, max_length=5000, description="Album description")


class AlbumUpdate(BaseModel):
    """Schema for updating an album. Only fields present in the body are applied."""
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    cover_photo_id: Optional[UUID] = Field(None, description="Member photo to use as cover, or null to clear")


class AlbumResponse(BaseModel):
    """Album summary as listed."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: Optional[str] = None
    cover_photo_id: Optional[UUID] = None
    is_public: bool
    photo_count: int = 0
    created_at: datetime
    updated_at: datetime


class SharedAlbumResponse(AlbumResponse):
    """Album shared with the caller, with the caller's permission."""
    permission: SharePermission


class AlbumListResponse(BaseModel):
    owned: List[AlbumResponse]
    shared_with_me: List[SharedAlbumResponse]


class AlbumShareResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: Optional[str] = None
    username: Optional[str] = None
    permission: SharePermission
    expires_at: Optional[datetime] = None
    shared_at: datetime


class AlbumDetailResponse(AlbumResponse):
    """
    Album with resolved photos.

    `shares`, `public_token` and `public_expires_at` are only filled in
    for the owner.
    """
    access: AlbumAccess
    photos: List[PhotoResponse] = []
    shares: Optional[List[AlbumShareResponse]] = None
    public_token: Optional[str] = None
    public_expires_at: Optional[datetime] = None


class PublicAlbumResponse(BaseModel):
    """Public projection of an album reached through its token."""
    id: UUID
    title: str
    description: Optional[str] = None
    created_at: datetime
    photos: List[PublicPhotoResponse]
    photo_count: int


class AddPhotosRequest(BaseModel):
    photo_ids: List[str] = Field(..., max_length=1000, description="Photo ids to add")


class AddPhotosResult(BaseModel):
    total: int
    added: int
    skipped: int


class ShareAlbumRequest(BaseModel):
    """Share with exactly one grantee, by email or by username."""
    email: Optional[str] = Field(None, max_length=255)
    username: Optional[str] = Field(None, max_length=100)
    permission: SharePermission = SharePermission.view
    expires_at: Optional[datetime] = None

    @field_validator('email')
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        # Shares match User.email exactly, so keep the address as typed
        if v is None or not v.strip():
            return None
        try:
            _email_adapter.validate_python(v.strip())
        except ValueError:
            raise ValueError("value is not a valid email address")
        return v.strip()

    @field_validator('username')
    @classmethod
    def strip_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class PublicLinkRequest(BaseModel):
    expires_at: Optional[datetime] = Field(None, description="Link stops working at this time")


class PublicLinkResponse(BaseModel):
    """New public link. Serialized with camelCase keys."""
    model_config = ConfigDict(populate_by_name=True)

    public_token: str = Field(..., alias="publicToken")
    public_url: str = Field(..., alias="publicUrl")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    qr_code: Optional[str] = Field(None, alias="qrCode", description="PNG data URL of the public link")
