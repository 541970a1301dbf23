"""Profile and identity endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from photovault.api.deps import get_current_user
from photovault.app.exceptions import NotFoundOrForbidden, PrivateProfile, ValidationError
from photovault.db.base import get_db
from photovault.models.user import User
from photovault.repositories.user_repo import UserRepository
from photovault.schemas.common import ApiResponse
from photovault.schemas.user import (
    PROFILE_FIELD_PATHS,
    IdentityResponse,
    ProfileFieldUpdate,
    ProfileUpdate,
    PublicProfileResponse,
    UserResponse,
    nest_field,
)
from photovault.utils.validators import try_parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/auth/me', response_model=ApiResponse[IdentityResponse])
def me(current_user: User = Depends(get_current_user)):
    """Local identity for the bearer token, created on first call."""
    return ApiResponse(data=IdentityResponse.model_validate(current_user))


@router.get('/profile', response_model=ApiResponse[UserResponse])
def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.put('/profile', response_model=ApiResponse[UserResponse])
def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update profile fields. Fields left out of the body keep their value;
    nested `social_links` and `preferences` are merged key by key.
    """
    patch = profile_data.model_dump(mode='json', exclude_unset=True)
    user = UserRepository(db).update_profile(current_user, patch)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.patch('/profile/field/{field_path}', response_model=ApiResponse[UserResponse])
def update_profile_field(
    field_path: str,
    body: ProfileFieldUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a single profile field addressed by a dotted path such as
    `preferences.theme`. The value goes through the same validation as
    a full profile update.
    """
    if field_path not in PROFILE_FIELD_PATHS:
        raise ValidationError("Invalid field path", detail=field_path)

    try:
        update = ProfileUpdate.model_validate(nest_field(field_path, body.value))
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationError(f"{field_path}: {error.get('msg')}")

    patch = update.model_dump(mode='json', exclude_unset=True)
    user = UserRepository(db).update_profile(current_user, patch)
    logger.info(f"User {user.id} updated profile field {field_path}")
    return ApiResponse(data=UserResponse.model_validate(user))


@router.get('/profile/public/{user_id}', response_model=ApiResponse[PublicProfileResponse])
def get_public_profile(user_id: str, db: Session = Depends(get_db)):
    """Public profile for sharing. No authentication required."""
    parsed = try_parse_uuid(user_id)
    user = UserRepository(db).get(parsed) if parsed else None
    if user is None:
        raise NotFoundOrForbidden("User not found")

    preferences = (user.profile or {}).get('preferences') or {}
    if preferences.get('privacy') == 'private':
        raise PrivateProfile()

    return ApiResponse(data=PublicProfileResponse.from_user(user))
