"""Tests for password hashing and session tokens."""

import base64
from datetime import timedelta

import pytest
from jose import jwt

from quizmaker.core.security import (
    DERIVED_KEY_BYTES,
    SALT_BYTES,
    TokenManager,
    TokenPayload,
    get_password_hash,
    verify_password,
)


# ============================================================
# Password hashing
# ============================================================

def test_hash_layout_is_salt_then_key():
    hashed = get_password_hash("SecurePass123")
    raw = base64.b64decode(hashed)
    assert len(raw) == SALT_BYTES + DERIVED_KEY_BYTES


def test_same_password_hashes_differently():
    assert get_password_hash("SecurePass123") != get_password_hash("SecurePass123")


def test_verify_password_round_trip():
    hashed = get_password_hash("SecurePass123")
    assert verify_password("SecurePass123", hashed) is True
    assert verify_password("securepass123", hashed) is False


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        get_password_hash("")


@pytest.mark.parametrize("stored", [
    "",
    "not base64 at all!",
    base64.b64encode(b"too short").decode(),
    base64.b64encode(b"x" * (SALT_BYTES + DERIVED_KEY_BYTES + 1)).decode(),
])
def test_verify_password_rejects_malformed_hashes(stored):
    assert verify_password("SecurePass123", stored) is False


# ============================================================
# Tokens
# ============================================================

def test_token_has_three_segments_and_expected_claims(token_manager):
    token = token_manager.issue_token("user-1", "instructor")
    assert token.count(".") == 2

    header = jwt.get_unverified_header(token)
    assert header["alg"] == "HS256"

    claims = jwt.get_unverified_claims(token)
    assert claims["userId"] == "user-1"
    assert claims["role"] == "instructor"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_verify_token_returns_principal(token_manager):
    token = token_manager.issue_token("user-1", "student")
    assert token_manager.verify_token(token) == TokenPayload(user_id="user-1", role="student")


def test_expired_token_is_rejected(token_manager):
    token = token_manager.issue_token("user-1", "student", expires_delta=timedelta(seconds=-10))
    assert token_manager.verify_token(token) is None


def test_token_signed_with_other_secret_is_rejected(token_manager):
    forged = TokenManager(secret_key="someone-else").issue_token("user-1", "instructor")
    assert token_manager.verify_token(forged) is None


def test_tampered_payload_is_rejected(token_manager):
    header, _, signature = token_manager.issue_token("user-1", "student").split(".")
    payload = TokenManager(secret_key="x").issue_token("user-1", "instructor").split(".")[1]
    assert token_manager.verify_token(f"{header}.{payload}.{signature}") is None


@pytest.mark.parametrize("token", [None, "", "abc", "a.b", "a.b.c.d", "a.b.c"])
def test_malformed_tokens_are_rejected(token_manager, token):
    assert token_manager.verify_token(token) is None


def test_token_without_user_id_is_rejected(token_manager):
    token = jwt.encode(
        {"role": "student", "exp": 4102444800},
        "unit-test-secret",
        algorithm="HS256",
    )
    assert token_manager.verify_token(token) is None


def test_token_without_expiry_is_rejected(token_manager):
    token = jwt.encode({"userId": "user-1", "role": "student"}, "unit-test-secret", algorithm="HS256")
    assert token_manager.verify_token(token) is None


def test_token_manager_requires_secret():
    with pytest.raises(ValueError):
        TokenManager(secret_key="")
