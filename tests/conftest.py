"""
Shared test configuration
"""
import os

# Settings are read at import time, so the environment is fixed before any app import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH0_DOMAIN"] = "photovault-test.auth0.com"
os.environ["AUTH0_AUDIENCE"] = "https://api.photovault.test"
os.environ["FRONTEND_URL"] = "https://photovault.test"
os.environ["S3_BUCKET_NAME"] = "photovault-test"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from photovault.db.base import Base, build_engine
from photovault.models import User, Photo, utcnow
from photovault.services.albums import AlbumService
from photovault.services.photos import PhotoService
from photovault.services.storage.s3 import S3Service


class FrozenClock:
    """Callable clock for services; tests move `now` by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def fake_presign(ClientMethod=None, Params=None, ExpiresIn=None, **kwargs):
    return f"https://signed.test/{Params['Key']}?method={ClientMethod}&expires={ExpiresIn}"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create test database session."""
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def s3_client():
    """boto3 client stand-in that signs URLs deterministically."""
    client = MagicMock()
    client.generate_presigned_url.side_effect = fake_presign
    return client


@pytest.fixture
def storage(s3_client):
    return S3Service(client=s3_client, bucket_name="photovault-test", max_workers=4)


@pytest.fixture
def clock():
    return FrozenClock(utcnow().replace(microsecond=0))


@pytest.fixture
def album_service(db_session, storage, clock):
    return AlbumService(db_session, storage, clock=clock)


@pytest.fixture
def photo_service(db_session, storage):
    return PhotoService(db_session, storage)


@pytest.fixture
def make_user(db_session):
    def _make_user(username: str, email: str = None) -> User:
        user = User(
            auth_provider_id=f"auth0|{username}",
            username=username,
            email=email or f"{username}@example.com",
            name=username.title(),
            profile={},
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_photo(db_session):
    counter = {"n": 0}

    def _make_photo(owner: User, uploaded_at: datetime = None, **fields) -> Photo:
        counter["n"] += 1
        n = counter["n"]
        photo = Photo(
            user_id=owner.id,
            s3_key=f"users/{owner.username}/photos/2026/10/photo-{n}.jpg",
            filename=f"photo-{n}.jpg",
            original_name=f"IMG_{n:04d}.jpg",
            mime_type="image/jpeg",
            file_size=1000 * n,
            uploaded_at=uploaded_at or (utcnow() - timedelta(minutes=100 - n)),
            **fields,
        )
        db_session.add(photo)
        db_session.commit()
        db_session.refresh(photo)
        return photo
    return _make_photo
