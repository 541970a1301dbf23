import pytest


@pytest.mark.integration
def test_get_profile(client, alice_headers):
    response = client.get("/api/profile", headers=alice_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert data["profile"] == {}


@pytest.mark.integration
def test_update_profile_merges_nested_fields(client, alice_headers):
    client.put("/api/profile", headers=alice_headers, json={
        "display_name": "Alice A.",
        "birth_date": "1990-05-01",
        "preferences": {"theme": "dark", "notifications": {"email": True}},
    })
    response = client.put("/api/profile", headers=alice_headers, json={
        "bio": "Photographer",
        "preferences": {"privacy": "friends"},
    })

    assert response.status_code == 200
    profile = response.json()["data"]["profile"]
    assert profile["display_name"] == "Alice A."
    assert profile["bio"] == "Photographer"
    assert profile["birth_date"] == "1990-05-01"
    assert profile["preferences"] == {
        "theme": "dark",
        "privacy": "friends",
        "notifications": {"email": True},
    }


@pytest.mark.integration
@pytest.mark.parametrize("body", [
    {"website": "ftp://example.com"},
    {"bio": "x" * 501},
    {"preferences": {"theme": "neon"}},
    {"phone": "call me"},
    {"unknown_field": "value"},
])
def test_invalid_profile_is_400(client, alice_headers, body):
    response = client.put("/api/profile", headers=alice_headers, json=body)
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.integration
def test_update_single_profile_field(client, alice_headers):
    client.put("/api/profile", headers=alice_headers, json={"preferences": {"theme": "dark", "privacy": "public"}})

    response = client.patch(
        "/api/profile/field/preferences.notifications.sharing",
        headers=alice_headers,
        json={"value": False},
    )

    assert response.status_code == 200
    assert response.json()["data"]["profile"]["preferences"] == {
        "theme": "dark",
        "privacy": "public",
        "notifications": {"sharing": False},
    }


@pytest.mark.integration
@pytest.mark.parametrize("path, value", [
    ("email", "someone@example.com"),
    ("preferences", {"theme": "dark"}),
    ("website", "ftp://example.com"),
    ("preferences.theme", "neon"),
])
def test_invalid_profile_field_update_is_400(client, alice_headers, path, value):
    response = client.patch(f"/api/profile/field/{path}", headers=alice_headers, json={"value": value})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.integration
def test_profile_field_update_requires_auth(client):
    response = client.patch("/api/profile/field/bio", json={"value": "hi"})
    assert response.status_code == 401


@pytest.mark.integration
def test_public_profile_projection(client, alice_headers):
    alice_id = client.get("/api/profile", headers=alice_headers).json()["data"]["id"]
    client.put("/api/profile", headers=alice_headers, json={
        "display_name": "Alice A.",
        "bio": "Photographer",
        "phone": "+1 555 0100",
        "social_links": {"github": "alice"},
    })

    response = client.get(f"/api/profile/public/{alice_id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert "email" not in data
    assert data["profile"]["display_name"] == "Alice A."
    assert data["profile"]["bio"] == "Photographer"
    assert data["profile"]["social_links"]["github"] == "alice"
    assert "phone" not in data["profile"]


@pytest.mark.integration
def test_private_public_profile_is_403(client, alice_headers):
    alice_id = client.get("/api/profile", headers=alice_headers).json()["data"]["id"]
    client.patch("/api/profile/field/preferences.privacy", headers=alice_headers, json={"value": "private"})

    response = client.get(f"/api/profile/public/{alice_id}")

    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Profile is private"}


@pytest.mark.integration
@pytest.mark.parametrize("user_id", ["8f0c6b8e-6d3b-4c1a-9a8e-0e6f2b7c9d10", "not-an-id"])
def test_unknown_public_profile_is_404(client, user_id):
    response = client.get(f"/api/profile/public/{user_id}")
    assert response.status_code == 404
