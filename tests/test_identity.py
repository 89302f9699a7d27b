from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import jwt

from domain.models.identity import UserRole
from infrastructure.adapters.identity.jwt_identity import JwtIdentityProvider

SECRET = "test-secret-that-is-long-enough-for-hs256"


def test_issued_token_resolves_to_caller() -> None:
    provider = JwtIdentityProvider(SECRET)
    user_id = uuid4()

    caller = provider.resolve_caller(provider.issue_token(user_id, UserRole.HOST))

    assert caller.user_id == user_id
    assert caller.role == UserRole.HOST
    assert caller.is_privileged


def test_bearer_prefix_and_default_role() -> None:
    provider = JwtIdentityProvider(SECRET)
    user_id = uuid4()
    token = jwt.encode({"sub": str(user_id)}, SECRET, algorithm="HS256")

    caller = provider.resolve_caller(f"Bearer {token}")

    assert caller.user_id == user_id
    assert caller.role == UserRole.PARTICIPANT


def test_lowercase_role_claim() -> None:
    provider = JwtIdentityProvider(SECRET)
    token = jwt.encode({"sub": str(uuid4()), "role": "admin"}, SECRET, algorithm="HS256")

    assert provider.resolve_caller(token).is_admin


def test_invalid_tokens_resolve_to_none() -> None:
    provider = JwtIdentityProvider(SECRET)
    other = JwtIdentityProvider("another-secret-that-is-also-long-enough")

    assert provider.resolve_caller(None) is None
    assert provider.resolve_caller("not-a-token") is None
    assert provider.resolve_caller(other.issue_token(uuid4())) is None
    assert provider.resolve_caller(provider.issue_token(uuid4(), expires_in=timedelta(seconds=-5))) is None
    assert provider.resolve_caller(jwt.encode({"sub": "bob"}, SECRET, algorithm="HS256")) is None


def test_provider_without_secret_rejects_everything() -> None:
    token = JwtIdentityProvider(SECRET).issue_token(uuid4())
    assert JwtIdentityProvider("").resolve_caller(token) is None
