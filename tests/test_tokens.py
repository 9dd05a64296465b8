"""Tests for token, password and session-cookie utilities"""
from datetime import datetime, timedelta

import pytest

from forms_admin.utils.passwords import hash_password, password_policy, verify_password
from forms_admin.utils.session_tokens import decode_session_cookie, encode_session_cookie
from forms_admin.utils.tokens import generate_token, hash_token, is_expired

SECRET = "x" * 40


def test_generate_token_is_64_hex_chars():
    token = generate_token()
    assert len(token) == 64
    int(token, 16)


def test_generate_token_is_unique():
    assert len({generate_token() for _ in range(50)}) == 50


def test_hash_token_is_deterministic_sha256():
    assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")


def test_is_expired_boundaries():
    now = datetime(2025, 1, 1, 12, 0, 0)
    assert is_expired(now, now) is True
    assert is_expired(now + timedelta(seconds=1), now) is False
    assert is_expired(now - timedelta(seconds=1), now) is True


def test_is_expired_missing_expiry():
    assert is_expired(None) is True


@pytest.mark.parametrize("password, message", [
    ("Sh0rt!", "at least 8 characters"),
    ("alllower1!", "uppercase"),
    ("ALLUPPER1!", "lowercase"),
    ("NoDigits!!", "number"),
    ("NoSpecial12", "special character"),
])
def test_password_policy_rejects(password, message):
    with pytest.raises(ValueError) as exc:
        password_policy.validate(password)
    assert message in str(exc.value)


def test_password_policy_accepts_strong_password():
    assert password_policy.validate("Str0ng!Pass") == "Str0ng!Pass"
    assert password_policy.violations("Str0ng!Pass") == []


def test_password_policy_lists_every_violation():
    assert len(password_policy.violations("")) == 5


def test_hash_and_verify_password():
    hashed = hash_password("Str0ng!Pass", rounds=4)
    assert hashed.startswith("$2")
    assert verify_password("Str0ng!Pass", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_password_with_missing_or_malformed_hash():
    assert verify_password("anything", None) is False
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_session_cookie_round_trip():
    cookie = encode_session_cookie("sid-123", SECRET, 60)
    assert decode_session_cookie(cookie, SECRET) == "sid-123"


def test_session_cookie_rejects_wrong_secret_and_garbage():
    cookie = encode_session_cookie("sid-123", SECRET, 60)
    assert decode_session_cookie(cookie, "y" * 40) is None
    assert decode_session_cookie("garbage", SECRET) is None
    assert decode_session_cookie(None, SECRET) is None


def test_session_cookie_rejects_expired():
    cookie = encode_session_cookie("sid-123", SECRET, -10)
    assert decode_session_cookie(cookie, SECRET) is None
