"""Unit tests for TokenVerifier."""

import time
import uuid

import pytest

from profilehub.infra.jwt import JWTTokenProvider
from profilehub.services._shared.errors import InvalidTokenError, RevokedTokenError
from profilehub.services._shared.ports import InMemoryRevocationRegistry
from profilehub.services.auth import TokenVerifier


@pytest.fixture()
def provider():
    return JWTTokenProvider(access_secret="a", refresh_secret="r")


@pytest.fixture()
def registry():
    reg = InMemoryRevocationRegistry(auto_purge=False)
    yield reg
    reg.close()


@pytest.fixture()
def verifier(provider, registry):
    return TokenVerifier(token_provider=provider, revocations=registry)


def test_valid_access_token(verifier, provider):
    user_id = uuid.uuid4()
    assert verifier.verify_access_token(provider.issue_access_token(user_id)).user_id == user_id


def test_revoked_access_token(verifier, provider, registry):
    token = provider.issue_access_token(uuid.uuid4())
    registry.revoke(token, time.time() + 60)

    with pytest.raises(RevokedTokenError):
        verifier.verify_access_token(token)


def test_signature_checked_before_registry(verifier, registry):
    registry.revoke("garbage", time.time() + 60)
    with pytest.raises(InvalidTokenError):
        verifier.verify_access_token("garbage")


def test_refresh_token_ignores_registry(verifier, provider, registry):
    token = provider.issue_refresh_token(uuid.uuid4(), 2)
    registry.revoke(token, time.time() + 60)

    assert verifier.verify_refresh_token(token).version == 2
