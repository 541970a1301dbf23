# photovault/utils/validators.py

import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from photovault.app.config import settings
from photovault.app.exceptions import ValidationError

# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
}

PUBLIC_TOKEN_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


# ---------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------

def validate_public_token(token: str) -> str:
    """
    Reject anything that is not 64 hex characters before it reaches storage.

    Returns:
        The token, lowercased
    """
    if not token or not PUBLIC_TOKEN_PATTERN.match(token):
        raise ValidationError("Invalid public token format")
    return token.lower()


def validate_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Album title is required")
    return cleaned


def clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    return description.strip() or None


def parse_uuid(value, field: str = "id") -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")


def try_parse_uuid(value) -> Optional[UUID]:
    try:
        return parse_uuid(value)
    except ValidationError:
        return None


def validate_upload(content_type: str, file_size: int) -> None:
    """
    Check a declared upload before issuing a presigned PUT URL.

    Raises:
        ValidationError: unsupported type or size over the limit
    """
    if content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f"Unsupported content type: {content_type}")
    if file_size <= 0:
        raise ValidationError("File size must be positive")
    if file_size > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File too large: {file_size} bytes (limit {settings.MAX_UPLOAD_BYTES})"
        )


def validate_year_month(year: Optional[int], month: Optional[int]) -> None:
    if month is not None and year is None:
        raise ValidationError("month requires year")
    if year is not None and not 1970 <= year <= datetime.now().year + 1:
        raise ValidationError("year out of range")
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
