"""Resolve a verified bearer token to a local user, creating it on first sight."""
import logging
import re
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photovault.app.exceptions import IncompleteIdentity
from photovault.core.security import TokenVerifier
from photovault.models.user import User
from photovault.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 90


def normalize_username(value: str) -> str:
    """Lowercase and strip everything that is not a letter or digit."""
    return re.sub(r"[^a-z0-9]", "", (value or "").lower())[:MAX_USERNAME_LENGTH]


def extract_email(claims: Dict[str, Any]) -> Optional[str]:
    """Standard `email` claim first, then any namespaced `.../email` custom claim."""
    email = claims.get("email")
    if email:
        return email
    for key, value in claims.items():
        if key.endswith("/email") and value:
            return value
    return None


class IdentityService:
    """Maps identity provider subjects onto local `User` records."""

    def __init__(self, db: Session, verifier: TokenVerifier):
        self.db = db
        self.verifier = verifier
        self.users = UserRepository(db)

    def resolve(self, token: str, claims: Dict[str, Any]) -> User:
        """
        Return the local user for verified claims.

        Args:
            token: Raw bearer token, used for the userinfo fallback
            claims: Verified token claims

        Raises:
            IncompleteIdentity: no email could be found for a new subject
        """
        subject = claims.get("sub")
        user = self.users.get_by_auth_provider_id(subject)
        if user:
            return self._refresh(user, claims)

        profile = dict(claims)
        email = extract_email(claims)
        if not email:
            logger.info(f"No email claim for {subject}, falling back to userinfo")
            profile.update(self.verifier.fetch_userinfo(token))
            email = extract_email(profile)
        if not email:
            raise IncompleteIdentity("Email address required to create an account")

        return self._create(subject, email, profile)

    def _create(self, subject: str, email: str, profile: Dict[str, Any]) -> User:
        name = profile.get("name") or profile.get("nickname") or email.split("@")[0]
        username = self._unique_username(name, email)

        user = User(
            auth_provider_id=subject,
            username=username,
            email=email,
            name=name,
            avatar_url=profile.get("picture"),
            email_verified=bool(profile.get("email_verified", False)),
            profile={},
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request created the same subject first
            self.db.rollback()
            existing = self.users.get_by_auth_provider_id(subject)
            if existing is None:
                raise
            return existing

        self.db.refresh(user)
        logger.info(f"Created user {user.username} for subject {subject}")
        return user

    def _refresh(self, user: User, claims: Dict[str, Any]) -> User:
        changes = {}
        if claims.get("name") and claims["name"] != user.name:
            changes["name"] = claims["name"]
        if claims.get("picture") and claims["picture"] != user.avatar_url:
            changes["avatar_url"] = claims["picture"]
        if "email_verified" in claims and bool(claims["email_verified"]) != user.email_verified:
            changes["email_verified"] = bool(claims["email_verified"])
        if not changes:
            return user
        return self.users.update(user.id, changes)

    def _unique_username(self, name: str, email: str) -> str:
        base = normalize_username(name) or normalize_username(email.split("@")[0]) or "user"
        candidate = base
        suffix = 0
        while self.users.username_exists(candidate):
            suffix += 1
            candidate = f"{base}_{suffix}"
        return candidate
