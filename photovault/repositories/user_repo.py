"""User repository extending base repository."""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from photovault.repositories.base import BaseRepository
from photovault.models.user import User


class UserRepository(BaseRepository[User]):
    """Repository for user database operations."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_auth_provider_id(self, auth_provider_id: str) -> Optional[User]:
        return self.get_by_field('auth_provider_id', auth_provider_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.get_by_field('username', username)

    def username_exists(self, username: str) -> bool:
        query = self.db.query(User.id).filter(User.username == username)
        return self.db.query(query.exists()).scalar()

    def update_profile(self, user: User, profile_patch: Dict[str, Any]) -> User:
        """
        Merge a partial profile into the stored profile sub-document.

        Nested dictionaries (social links, preferences) are merged key by
        key so that a patch of a single preference keeps the others.

        Args:
            user: User to update
            profile_patch: Partial profile, already validated

        Returns:
            Updated user
        """
        # Reassign so the JSON column is flagged dirty
        user.profile = _merge_dicts(user.profile or {}, profile_patch)
        self.db.commit()
        self.db.refresh(user)
        return user


def _merge_dicts(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
