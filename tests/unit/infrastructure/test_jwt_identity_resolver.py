from datetime import timedelta

import pytest
from jose import jwt

from vagas_api.domain.errors import AuthenticationError
from vagas_api.infrastructure.auth import JWTIdentityResolver


def test_issued_token_resolves_to_subject() -> None:
    resolver = JWTIdentityResolver(secret_key="test-secret")

    token = resolver.issue("user-1")

    assert resolver.resolve(token) == "user-1"


def test_token_signed_with_other_key_is_rejected() -> None:
    issuer = JWTIdentityResolver(secret_key="other-secret")
    resolver = JWTIdentityResolver(secret_key="test-secret")

    with pytest.raises(AuthenticationError, match="Token validation failed"):
        resolver.resolve(issuer.issue("user-1"))


def test_expired_token_is_rejected() -> None:
    resolver = JWTIdentityResolver(secret_key="test-secret")

    token = resolver.issue("user-1", expires_in=timedelta(seconds=-5))

    with pytest.raises(AuthenticationError):
        resolver.resolve(token)


def test_token_without_subject_is_rejected() -> None:
    token = jwt.encode({"role": "owner"}, "test-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError, match="subject"):
        JWTIdentityResolver(secret_key="test-secret").resolve(token)


def test_audience_is_enforced_when_configured() -> None:
    resolver = JWTIdentityResolver(secret_key="test-secret", audience="vagas")
    foreign = JWTIdentityResolver(secret_key="test-secret", audience="other")

    assert resolver.resolve(resolver.issue("owner-1")) == "owner-1"
    with pytest.raises(AuthenticationError):
        resolver.resolve(foreign.issue("owner-1"))


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(AuthenticationError):
        JWTIdentityResolver(secret_key="test-secret").resolve("not-a-jwt")


def test_empty_secret_is_a_configuration_error() -> None:
    with pytest.raises(ValueError, match="secret_key"):
        JWTIdentityResolver(secret_key="")
