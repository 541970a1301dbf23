import pytest


@pytest.mark.integration
def test_health_endpoint(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.integration
def test_storage_health(client, s3_client):
    response = client.get("/health/storage")
    assert response.status_code == 200
    assert response.json()["data"]["accessible"] is True


@pytest.mark.integration
def test_storage_health_failure_uses_envelope(client, s3_client):
    from botocore.exceptions import ClientError
    s3_client.head_bucket.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadBucket")

    response = client.get("/health/storage")

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "Bucket not found" in response.json()["error"]


@pytest.mark.integration
def test_missing_token_is_401(client):
    response = client.get("/api/albums")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Missing bearer token"}


@pytest.mark.integration
def test_invalid_token_is_401(client):
    response = client.get("/api/albums", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.integration
def test_me_creates_user_on_first_call(client, alice_headers):
    first = client.get("/api/auth/me", headers=alice_headers)
    second = client.get("/api/auth/me", headers=alice_headers)

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["data"]["username"] == "alice"
    assert body["data"]["email"] == "alice@example.com"
    assert second.json()["data"]["id"] == body["data"]["id"]


@pytest.mark.integration
def test_identity_without_email_is_403(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer no-email-token"})
    assert response.status_code == 403
    assert response.json()["success"] is False
