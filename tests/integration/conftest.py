"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient

from photovault.app.exceptions import Unauthenticated
from photovault.app.main import app
from photovault.api.deps import get_storage, get_token_verifier
from photovault.db.base import get_db


IDENTITIES = {
    "alice-token": {"sub": "auth0|alice", "email": "alice@example.com", "name": "Alice"},
    "bob-token": {"sub": "auth0|bob", "email": "bob@example.com", "name": "Bob"},
    "carol-token": {"sub": "auth0|carol", "email": "carol@example.com", "name": "Carol"},
    "no-email-token": {"sub": "auth0|ghost", "name": "Ghost"},
}


class FakeVerifier:
    """Maps opaque test tokens onto claims instead of verifying signatures."""

    def verify(self, token):
        claims = IDENTITIES.get(token)
        if claims is None:
            raise Unauthenticated("Invalid token")
        return dict(claims)

    def fetch_userinfo(self, token):
        return {}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db_session, storage):
    """FastAPI test client with dependency overrides."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_verifier] = lambda: FakeVerifier()
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def alice_headers():
    return auth("alice-token")


@pytest.fixture
def bob_headers():
    return auth("bob-token")


@pytest.fixture
def carol_headers():
    return auth("carol-token")
