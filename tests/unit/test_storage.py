import re
from datetime import datetime

import pytest
from botocore.exceptions import ClientError

from photovault.services.storage.s3 import S3Service, S3ServiceError


def client_error(code="500"):
    return ClientError({"Error": {"Code": code, "Message": "failure"}}, "Operation")


def test_generate_s3_key_layout():
    key = S3Service.generate_s3_key("alice", "Beach Day.JPG", now=datetime(2026, 3, 9))

    assert re.fullmatch(r"users/alice/photos/2026/03/[0-9a-f\-]{36}\.jpg", key)


def test_generate_s3_key_defaults_extension():
    assert S3Service.generate_s3_key("alice", "noext").endswith(".jpg")


def test_issue_download_url_passes_bucket_key_and_ttl(storage, s3_client):
    url = storage.issue_download_url("users/alice/a.jpg", 7200)

    assert url == "https://signed.test/users/alice/a.jpg?method=get_object&expires=7200"
    s3_client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "photovault-test", "Key": "users/alice/a.jpg"},
        ExpiresIn=7200,
    )


def test_issue_upload_url_signs_content_type(storage, s3_client):
    storage.issue_upload_url("users/alice/a.png", "image/png", 600)

    s3_client.generate_presigned_url.assert_called_once_with(
        "put_object",
        Params={"Bucket": "photovault-test", "Key": "users/alice/a.png", "ContentType": "image/png"},
        ExpiresIn=600,
    )


def test_batch_preserves_order(storage):
    keys = [f"k{i}" for i in range(10)]

    results = storage.issue_batch_download_urls(keys, 3600)

    assert [item["key"] for item in results] == keys
    assert all(item["url"].startswith(f"https://signed.test/{item['key']}") for item in results)


def test_batch_retries_transient_failures(storage, s3_client):
    attempts = {}

    def flaky(ClientMethod=None, Params=None, ExpiresIn=None):
        key = Params["Key"]
        attempts[key] = attempts.get(key, 0) + 1
        if key == "k1" and attempts[key] == 1:
            raise client_error()
        return f"https://signed.test/{key}"

    s3_client.generate_presigned_url.side_effect = flaky

    results = storage.issue_batch_download_urls(["k0", "k1", "k2"], 3600)

    assert [item["url"] for item in results] == [
        "https://signed.test/k0",
        "https://signed.test/k1",
        "https://signed.test/k2",
    ]
    assert attempts["k1"] == 2


def test_batch_gives_none_for_permanent_failures(storage, s3_client):
    def broken(ClientMethod=None, Params=None, ExpiresIn=None):
        if Params["Key"] == "bad":
            raise client_error()
        return f"https://signed.test/{Params['Key']}"

    s3_client.generate_presigned_url.side_effect = broken

    results = storage.issue_batch_download_urls(["good", "bad"], 3600)

    assert results == [
        {"key": "good", "url": "https://signed.test/good"},
        {"key": "bad", "url": None},
    ]


def test_batch_survives_unexpected_client_errors(storage, s3_client):
    def broken(ClientMethod=None, Params=None, ExpiresIn=None):
        if Params["Key"] == "odd":
            raise RuntimeError("credentials provider crashed")
        return f"https://signed.test/{Params['Key']}"

    s3_client.generate_presigned_url.side_effect = broken

    results = storage.issue_batch_download_urls(["a", "odd", "b"], 3600)

    assert [result["url"] for result in results] == [
        "https://signed.test/a",
        None,
        "https://signed.test/b",
    ]


def test_batch_of_nothing(storage, s3_client):
    assert storage.issue_batch_download_urls([], 3600) == []
    s3_client.generate_presigned_url.assert_not_called()


def test_single_url_failure_raises(storage, s3_client):
    s3_client.generate_presigned_url.side_effect = client_error()

    with pytest.raises(S3ServiceError):
        storage.issue_download_url("k", 3600)


def test_delete_object(storage, s3_client):
    storage.delete_object("users/alice/a.jpg")
    s3_client.delete_object.assert_called_once_with(Bucket="photovault-test", Key="users/alice/a.jpg")

    s3_client.delete_object.side_effect = client_error()
    with pytest.raises(S3ServiceError):
        storage.delete_object("users/alice/a.jpg")


def test_check_bucket_access(storage, s3_client):
    assert storage.check_bucket_access()["accessible"] is True

    s3_client.head_bucket.side_effect = client_error("404")
    with pytest.raises(S3ServiceError, match="Bucket not found"):
        storage.check_bucket_access()

    s3_client.head_bucket.side_effect = client_error("403")
    with pytest.raises(S3ServiceError, match="Access denied"):
        storage.check_bucket_access()


def test_storage_errors_map_to_server_error():
    assert S3ServiceError().status_code == 500
