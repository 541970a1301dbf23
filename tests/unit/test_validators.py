import pytest

from photovault.app.exceptions import ValidationError
from photovault.utils.validators import (
    validate_public_token,
    validate_title,
    clean_description,
    validate_upload,
    validate_year_month,
    try_parse_uuid,
)


def test_public_token_accepts_64_hex_and_lowercases():
    token = "AB" * 32
    assert validate_public_token(token) == "ab" * 32


@pytest.mark.parametrize("token", ["a" * 63, "a" * 65, "g" * 64, "", "../" + "a" * 61])
def test_public_token_rejects_bad_format(token):
    with pytest.raises(ValidationError):
        validate_public_token(token)


def test_title_is_trimmed_and_required():
    assert validate_title("  Trip  ") == "Trip"
    with pytest.raises(ValidationError):
        validate_title("   ")
    with pytest.raises(ValidationError):
        validate_title(None)


def test_blank_description_becomes_none():
    assert clean_description("   ") is None
    assert clean_description(" beach ") == "beach"
    assert clean_description(None) is None


def test_upload_validation():
    validate_upload("image/jpeg", 1024)
    with pytest.raises(ValidationError):
        validate_upload("application/pdf", 1024)
    with pytest.raises(ValidationError):
        validate_upload("image/png", 10 ** 12)


def test_year_month_validation():
    validate_year_month(None, None)
    validate_year_month(2024, 2)
    with pytest.raises(ValidationError):
        validate_year_month(None, 5)
    with pytest.raises(ValidationError):
        validate_year_month(2024, 13)


def test_try_parse_uuid():
    assert try_parse_uuid("not-a-uuid") is None
    assert try_parse_uuid("8f0c6b8e-6d3b-4c1a-9a8e-0e6f2b7c9d10") is not None
