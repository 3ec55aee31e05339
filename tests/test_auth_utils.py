from datetime import timedelta
import pytest
from jose import jwt
from skolara.auth.utils import (create_token, decode_token, format_phone_number, generate_otp, hash_token,
                                normalize_email_address, phone_digits, token_matches)
from skolara.config.settings import config_settings


@pytest.mark.parametrize("raw,expected", [
    ("+919876543210", "+919876543210"),
    ("+1 (415) 555-0100", "+14155550100"),
    ("4155550100", "+14155550100"),
    ("415-555-0100", "+14155550100"),
    ("919876543210", "+919876543210"),
    ("  98765 ", "+98765"),
])
def test_format_phone_number(raw, expected):
    assert format_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "abc", "+"])
def test_format_phone_number_without_digits(raw):
    with pytest.raises(ValueError):
        format_phone_number(raw)


def test_phone_digits():
    assert phone_digits("+14155550100") == 14155550100


def test_create_and_decode_token():
    token, expiry = create_token(7, 14155550100, "auth", timedelta(minutes=20))
    claims = decode_token(token)
    assert claims["user_id"] == 7
    assert claims["phone_number"] == 14155550100
    assert claims["type"] == "auth"
    assert claims["exp"] == int(expiry.timestamp())


def test_tokens_for_same_user_are_unique():
    first, _ = create_token(7, 14155550100, "auth", timedelta(minutes=20))
    second, _ = create_token(7, 14155550100, "auth", timedelta(minutes=20))
    assert first != second


def test_expired_token_is_rejected_unless_expiry_ignored():
    token, _ = create_token(7, 14155550100, "auth", timedelta(seconds=-30))
    assert decode_token(token) is None
    claims = decode_token(token, verify_exp=False)
    assert claims["user_id"] == 7


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"user_id": 1, "phone_number": 1}, "other-secret", algorithm=config_settings.JWT_ALGO)
    assert decode_token(token) is None
    assert decode_token(token, verify_exp=False) is None


def test_token_without_identity_claims_is_rejected():
    token = jwt.encode({"sub": "1"}, config_settings.JWT_SECRET, algorithm=config_settings.JWT_ALGO)
    assert decode_token(token) is None


def test_token_matches_hash():
    stored = hash_token("abc")
    assert token_matches("abc", stored)
    assert not token_matches("abd", stored)
    assert not token_matches("abc", None)


def test_generate_otp():
    otp = generate_otp(6)
    assert len(otp) == 6
    assert otp.isdigit()
    assert otp[0] != "0"


def test_normalize_email_address():
    assert normalize_email_address("  Asha@Example.COM ") == "asha@example.com"
    with pytest.raises(ValueError):
        normalize_email_address("not-an-email")
