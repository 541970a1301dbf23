import pytest


def publish_album(client, headers, expires_at=None):
    album_id = client.post("/api/albums", headers=headers, json={"title": "Trip", "description": "Beach"}).json()["data"]["id"]
    photo_id = client.post("/api/photos/upload-url", headers=headers, json={
        "file_name": "beach.jpg", "content_type": "image/jpeg", "file_size": 1024,
    }).json()["data"]["photo"]["id"]
    client.post(f"/api/albums/{album_id}/photos", headers=headers, json={"photo_ids": [photo_id]})
    body = {"expires_at": expires_at} if expires_at else None
    token = client.post(f"/api/albums/{album_id}/public", headers=headers, json=body).json()["data"]["publicToken"]
    return album_id, photo_id, token


@pytest.mark.integration
def test_public_album_projection(client, alice_headers):
    album_id, photo_id, token = publish_album(client, alice_headers)

    response = client.get(f"/api/public/albums/{token}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert set(data) == {"id", "title", "description", "created_at", "photos", "photo_count"}
    assert data["id"] == album_id
    assert data["photo_count"] == 1
    photo = data["photos"][0]
    assert photo["id"] == photo_id
    assert "user_id" not in photo
    assert "s3_key" not in photo
    assert "expires=7200" in photo["download_url"]


@pytest.mark.integration
def test_public_read_needs_no_auth_header(client, alice_headers):
    _, _, token = publish_album(client, alice_headers)
    assert client.get(f"/api/public/albums/{token}", headers={"Authorization": "Bearer forged"}).status_code == 200


@pytest.mark.integration
@pytest.mark.parametrize("token", ["a" * 63, "a" * 65, "x" * 64])
def test_malformed_token_is_400(client, token):
    response = client.get(f"/api/public/albums/{token}")
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.integration
def test_unknown_token_is_404(client):
    assert client.get(f"/api/public/albums/{'0' * 64}").status_code == 404


@pytest.mark.integration
def test_expired_link_is_404(client, alice_headers):
    _, _, token = publish_album(client, alice_headers, expires_at="2000-01-01T00:00:00Z")
    assert client.get(f"/api/public/albums/{token}").status_code == 404
