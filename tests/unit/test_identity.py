import pytest

from photovault.app.exceptions import IncompleteIdentity
from photovault.models.user import User
from photovault.services.identity import IdentityService, extract_email, normalize_username


@pytest.fixture
def verifier(mocker):
    verifier = mocker.Mock()
    verifier.fetch_userinfo.return_value = {}
    return verifier


@pytest.fixture
def identity(db_session, verifier):
    return IdentityService(db_session, verifier)


def test_normalize_username():
    assert normalize_username("Alice O'Neil-Smith") == "aliceoneilsmith"
    assert normalize_username("  ") == ""


def test_extract_email_prefers_standard_claim():
    assert extract_email({"email": "a@example.com", "https://photovault/email": "b@example.com"}) == "a@example.com"
    assert extract_email({"https://photovault/email": "b@example.com"}) == "b@example.com"
    assert extract_email({"sub": "x"}) is None


def test_first_sight_creates_user(identity, verifier):
    user = identity.resolve("token", {
        "sub": "auth0|1",
        "email": "alice@example.com",
        "name": "Alice Smith",
        "picture": "https://img.example/alice.png",
        "email_verified": True,
    })

    assert user.username == "alicesmith"
    assert user.email == "alice@example.com"
    assert user.avatar_url == "https://img.example/alice.png"
    assert user.email_verified is True
    verifier.fetch_userinfo.assert_not_called()


def test_known_subject_returns_existing_user(identity):
    first = identity.resolve("token", {"sub": "auth0|1", "email": "alice@example.com", "name": "Alice"})
    again = identity.resolve("token", {"sub": "auth0|1", "email": "alice@example.com", "name": "Alice"})

    assert again.id == first.id


def test_known_subject_refreshes_profile_claims(identity):
    first = identity.resolve("token", {"sub": "auth0|1", "email": "alice@example.com", "name": "Alice"})
    again = identity.resolve("token", {
        "sub": "auth0|1",
        "name": "Alice Cooper",
        "picture": "https://img.example/new.png",
        "email_verified": True,
    })

    assert again.id == first.id
    assert again.name == "Alice Cooper"
    assert again.avatar_url == "https://img.example/new.png"
    assert again.email_verified is True
    # Username is fixed at creation
    assert again.username == "alice"


def test_namespaced_email_claim(identity):
    user = identity.resolve("token", {"sub": "auth0|2", "https://photovault.app/email": "ns@example.com"})

    assert user.email == "ns@example.com"
    assert user.username == "ns"


def test_userinfo_fallback(identity, verifier):
    verifier.fetch_userinfo.return_value = {"email": "info@example.com", "name": "Info User"}

    user = identity.resolve("raw-token", {"sub": "auth0|3"})

    verifier.fetch_userinfo.assert_called_once_with("raw-token")
    assert user.email == "info@example.com"
    assert user.username == "infouser"


def test_no_email_is_incomplete_identity(identity, db_session):
    with pytest.raises(IncompleteIdentity):
        identity.resolve("token", {"sub": "auth0|4", "name": "Ghost"})

    assert db_session.query(User).count() == 0


def test_username_collisions_get_suffixes(identity):
    first = identity.resolve("t", {"sub": "auth0|a", "email": "a1@example.com", "name": "Sam"})
    second = identity.resolve("t", {"sub": "auth0|b", "email": "a2@example.com", "name": "sam"})
    third = identity.resolve("t", {"sub": "auth0|c", "email": "a3@example.com", "name": "S.A.M."})

    assert [first.username, second.username, third.username] == ["sam", "sam_1", "sam_2"]
