"""Token issuing and resolution."""

import time
from datetime import timedelta

import pytest
from jose import jwt

from app.core import config
from app.core.errors import AuthenticationError, ExpiredToken, InvalidToken, MalformedClaims
from app.core.permissions import Role
from app.core.security import hash_password, issue_token, resolve_token, verify_password


def test_resolve_issued_token():
    requester = resolve_token(issue_token(42, "admin"))
    assert requester.user_id == 42
    assert requester.role == Role.ADMIN
    assert requester.is_admin


def test_token_carries_identity_and_expiry():
    claims = jwt.get_unverified_claims(issue_token(1, "user"))
    assert claims["sub"] == "1"
    assert claims["role"] == "user"
    lifetime = claims["exp"] - time.time()
    assert abs(lifetime - config.JWT_EXPIRE_DAYS * 86400) < 60


def test_expired_token():
    token = issue_token(1, "user", expires_delta=timedelta(seconds=-10))
    with pytest.raises(ExpiredToken):
        resolve_token(token)


def test_tampered_token():
    token = issue_token(1, "user")
    with pytest.raises(InvalidToken):
        resolve_token(token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB"))


def test_garbage_token():
    with pytest.raises(InvalidToken):
        resolve_token("not-a-token")


def test_token_signed_with_other_secret():
    token = jwt.encode({"sub": "1", "role": "user"}, "some-other-secret", algorithm=config.JWT_ALGORITHM)
    with pytest.raises(InvalidToken):
        resolve_token(token)


@pytest.mark.parametrize("claims", [
    {"sub": "1"},
    {"role": "user"},
    {"sub": "abc", "role": "user"},
    {"sub": "1", "role": "superuser"},
    {"sub": "99999999999999999999", "role": "user"},
    {"sub": "0", "role": "user"},
])
def test_malformed_claims(claims):
    token = jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    with pytest.raises(MalformedClaims):
        resolve_token(token)


def test_token_errors_are_authentication_errors():
    for error in (InvalidToken, ExpiredToken, MalformedClaims):
        assert issubclass(error, AuthenticationError)
        assert error.status_code == 401


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
