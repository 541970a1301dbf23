#!/usr/bin/env python
"""Seed a development database with two users, a few photos and a shared album."""
from datetime import timedelta

from sqlalchemy.orm import Session

from photovault.db.base import SessionLocal, engine, Base
from photovault.models import User, Photo, Album, AlbumPhoto, AlbumShare, SharePermission, utcnow


def seed_users(db: Session):
    """Create test users mirroring identity provider accounts."""
    users = [
        User(
            auth_provider_id="auth0|seed-alice",
            username="alice",
            email="alice@test.com",
            name="Alice",
            email_verified=True,
            profile={"display_name": "Alice", "preferences": {"theme": "dark"}},
        ),
        User(
            auth_provider_id="auth0|seed-bob",
            username="bob",
            email="bob@test.com",
            name="Bob",
            email_verified=True,
            profile={},
        ),
    ]

    for user in users:
        existing = db.query(User).filter(User.email == user.email).first()
        if not existing:
            db.add(user)
            print(f"  → Created user: {user.username} <{user.email}>")

    db.commit()
    print("✅ Created test users")


def seed_photos(db: Session):
    """Create photo metadata for alice. Objects are not uploaded."""
    alice = db.query(User).filter(User.username == "alice").one()
    now = utcnow().replace(microsecond=0)

    for index in range(3):
        s3_key = f"users/alice/photos/{now:%Y}/{now:%m}/seed-{index}.jpg"
        if db.query(Photo).filter(Photo.s3_key == s3_key).first():
            continue
        db.add(Photo(
            user_id=alice.id,
            s3_key=s3_key,
            filename=f"seed-{index}.jpg",
            original_name=f"IMG_{1000 + index}.jpg",
            mime_type="image/jpeg",
            file_size=2_000_000 + index,
            uploaded_at=now - timedelta(minutes=index),
        ))
        print(f"  → Created photo: {s3_key}")

    db.commit()
    print("✅ Created test photos")


def seed_albums(db: Session):
    """Create alice's Trip album containing her photos, shared with bob."""
    alice = db.query(User).filter(User.username == "alice").one()

    album = db.query(Album).filter(Album.user_id == alice.id, Album.title == "Trip").first()
    if album:
        return

    album = Album(user_id=alice.id, title="Trip", description="Seeded album")
    db.add(album)
    db.flush()

    for photo in db.query(Photo).filter(Photo.user_id == alice.id).all():
        db.add(AlbumPhoto(album_id=album.id, photo_id=photo.id))

    db.add(AlbumShare(album_id=album.id, username="bob", permission=SharePermission.view))
    db.commit()
    print(f"  → Created album: {album.title}")
    print("✅ Created test albums")


if __name__ == "__main__":
    print("🌱 Seeding database...")
    print("=" * 50)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_users(db)
        seed_photos(db)
        seed_albums(db)
        print("=" * 50)
        print("✅ Database seeded successfully!")
    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()
