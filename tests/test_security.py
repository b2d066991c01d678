"""
Token service and password helpers
"""

from datetime import timedelta

import jwt

from security import Identity, TokenService, gravatar_url, hash_password, verify_password

SECRET = "unit-test-secret-at-least-32-bytes"


def test_issue_and_verify_round_trip():
    tokens = TokenService(SECRET)
    token = tokens.issue("64b7f0c2a1b2c3d4e5f60718")

    assert tokens.verify(token) == Identity(id="64b7f0c2a1b2c3d4e5f60718")


def test_token_expires_after_100_hours_by_default():
    tokens = TokenService(SECRET)
    payload = jwt.decode(tokens.issue("abc"), SECRET, algorithms=["HS256"])

    assert payload["user"] == {"id": "abc"}
    assert payload["exp"] - payload["iat"] == 360000


def test_verify_rejects_wrong_secret():
    token = TokenService("first-secret-at-least-32-bytes-long").issue("abc")

    assert TokenService("second-secret-at-least-32-bytes-long").verify(token) is None


def test_verify_rejects_expired_token():
    tokens = TokenService(SECRET)
    token = tokens.issue("abc", expires_delta=timedelta(seconds=-10))

    assert tokens.verify(token) is None


def test_verify_rejects_garbage_and_wrong_shape():
    tokens = TokenService(SECRET)
    no_user = jwt.encode({"sub": "abc"}, SECRET, algorithm="HS256")

    assert tokens.verify("not-a-token") is None
    assert tokens.verify("") is None
    assert tokens.verify(no_user) is None


def test_password_hashing():
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)
    assert not verify_password("hunter22", "")


def test_gravatar_url_is_derived_from_normalized_email():
    assert gravatar_url("  Ada@Example.com ") == gravatar_url("ada@example.com")
    assert gravatar_url("ada@example.com").startswith("https://www.gravatar.com/avatar/")
    assert "s=200" in gravatar_url("ada@example.com")
