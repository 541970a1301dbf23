import pytest
from sqlalchemy.exc import IntegrityError

from photovault.models import User, Album, AlbumPhoto, AlbumShare, Photo, SharePermission


def test_create_user(db_session):
    """Test user creation."""
    user = User(
        auth_provider_id="auth0|123",
        username="testuser",
        email="test@example.com",
        name="Test User",
        profile={},
    )
    db_session.add(user)
    db_session.commit()

    assert user.id is not None
    assert user.email_verified is False
    assert user.created_at is not None


def test_username_is_unique(db_session, make_user):
    make_user("alice")
    db_session.add(User(auth_provider_id="auth0|other", username="alice", email="other@example.com", profile={}))
    with pytest.raises(IntegrityError):
        db_session.commit()


def test_create_album(db_session, make_user):
    """Test album creation."""
    user = make_user("alice")

    album = Album(user_id=user.id, title="Trip", description="Summer")
    db_session.add(album)
    db_session.commit()

    assert album.id is not None
    assert album.is_public is False
    assert album.public_token is None
    assert album.memberships == []


def test_photo_metadata_column(db_session, make_user, make_photo):
    user = make_user("alice")
    photo = make_photo(user, extra_metadata={"camera": "X100V"})

    db_session.expire_all()
    reloaded = db_session.get(Photo, photo.id)
    assert reloaded.extra_metadata == {"camera": "X100V"}


def test_membership_is_unique_per_album_and_photo(db_session, make_user, make_photo):
    user = make_user("alice")
    photo = make_photo(user)
    album = Album(user_id=user.id, title="Trip")
    db_session.add(album)
    db_session.commit()

    album_id, photo_id = album.id, photo.id
    db_session.add(AlbumPhoto(album_id=album_id, photo_id=photo_id))
    db_session.commit()
    db_session.expunge_all()

    db_session.add(AlbumPhoto(album_id=album_id, photo_id=photo_id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert [m.photo_id for m in db_session.get(Album, album_id).memberships] == [photo_id]


def test_deleting_album_removes_memberships_and_shares_but_not_photos(db_session, make_user, make_photo):
    user = make_user("alice")
    photo = make_photo(user)
    album = Album(user_id=user.id, title="Trip")
    db_session.add(album)
    db_session.flush()
    db_session.add(AlbumPhoto(album_id=album.id, photo_id=photo.id))
    db_session.add(AlbumShare(album_id=album.id, username="bob", permission=SharePermission.view))
    db_session.commit()

    db_session.delete(album)
    db_session.commit()

    assert db_session.query(AlbumPhoto).count() == 0
    assert db_session.query(AlbumShare).count() == 0
    assert db_session.get(Photo, photo.id) is not None
