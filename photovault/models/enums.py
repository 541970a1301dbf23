"""Enums for database models."""
import enum


class SharePermission(str, enum.Enum):
    """Permission granted to a share grantee."""
    view = "view"
    edit = "edit"


class AlbumAccess(str, enum.Enum):
    """Resolved access level of a caller on an album."""
    owner = "owner"
    edit = "edit"
    view = "view"
    none = "none"
