"""User and profile schemas."""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import date, datetime
from uuid import UUID
from typing import Optional, List, Literal, Any
import re

PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]{7,20}$")


def _check_url(v: Optional[str]) -> Optional[str]:
    if v and not re.match(r"^https?://", v):
        raise ValueError('must start with http:// or https://')
    return v


class SocialLinks(BaseModel):
    twitter: Optional[str] = Field(None, max_length=255)
    instagram: Optional[str] = Field(None, max_length=255)
    linkedin: Optional[str] = Field(None, max_length=255)
    github: Optional[str] = Field(None, max_length=255)


class NotificationPreferences(BaseModel):
    email: Optional[bool] = None
    uploads: Optional[bool] = None
    sharing: Optional[bool] = None


class Preferences(BaseModel):
    theme: Optional[Literal["light", "dark", "auto"]] = None
    privacy: Optional[Literal["public", "private", "friends"]] = None
    notifications: Optional[NotificationPreferences] = None


class ProfileUpdate(BaseModel):
    """Partial profile update. Unset fields keep their stored value."""
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    occupation: Optional[str] = Field(None, max_length=100)
    interests: Optional[List[str]] = Field(None, max_length=50)
    social_links: Optional[SocialLinks] = None
    preferences: Optional[Preferences] = None

    @field_validator('website')
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v and not PHONE_PATTERN.match(v):
            raise ValueError('invalid phone number')
        return v

    @field_validator('birth_date')
    @classmethod
    def validate_birth_date(cls, v: Optional[date]) -> Optional[date]:
        if v and v > date.today():
            raise ValueError('birth_date cannot be in the future')
        return v

    @field_validator('interests')
    @classmethod
    def validate_interests(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        cleaned = [item.strip() for item in v if item and item.strip()]
        if any(len(item) > 50 for item in cleaned):
            raise ValueError('each interest must be at most 50 characters')
        return cleaned


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email_verified: bool
    profile: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class IdentityResponse(BaseModel):
    """Minimal identity consumed by the album service."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str


# Dotted paths accepted by the single-field profile update
PROFILE_FIELD_PATHS = frozenset({
    'first_name', 'last_name', 'display_name', 'bio', 'location',
    'website', 'phone', 'birth_date', 'occupation', 'interests',
    'social_links.twitter', 'social_links.instagram', 'social_links.linkedin', 'social_links.github',
    'preferences.theme', 'preferences.privacy',
    'preferences.notifications.email', 'preferences.notifications.uploads',
    'preferences.notifications.sharing',
})


def nest_field(field_path: str, value: Any) -> dict:
    """Turn `preferences.theme`, 'dark' into {'preferences': {'theme': 'dark'}}."""
    patch = value
    for part in reversed(field_path.split('.')):
        patch = {part: patch}
    return patch


class ProfileFieldUpdate(BaseModel):
    value: Any = None


class PublicProfileFields(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    occupation: Optional[str] = None
    interests: Optional[List[str]] = None
    social_links: Optional[SocialLinks] = None


class PublicProfileResponse(BaseModel):
    """What anyone may see of a user whose profile is not private."""
    id: UUID
    username: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    profile: PublicProfileFields

    @classmethod
    def from_user(cls, user) -> "PublicProfileResponse":
        stored = user.profile or {}
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            avatar_url=user.avatar_url,
            profile=PublicProfileFields.model_validate(
                {key: stored.get(key) for key in PublicProfileFields.model_fields}
            ),
        )
