# tests/unit/services/test_auth_service.py
from __future__ import annotations

import logging
import uuid
from datetime import timedelta

import pytest
from freezegun import freeze_time

from profilehub.infra.crypto import BcryptPasswordHasher
from profilehub.infra.jwt import JWTTokenProvider
from profilehub.models.user import User
from profilehub.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    NotFoundError,
    RevokedTokenError,
    ValidationError,
    VersionMismatchError,
)
from profilehub.services._shared.ports import InMemoryRevocationRegistry
from profilehub.services.auth import (
    AuthService,
    AuthSessionOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
)
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def tokens():
    return JWTTokenProvider(access_secret="unit-access", refresh_secret="unit-refresh")


@pytest.fixture()
def revocations():
    registry = InMemoryRevocationRegistry(auto_purge=False)
    yield registry
    registry.close()


@pytest.fixture()
def service(tokens, revocations) -> AuthService:
    """AuthService wired to real adapters with a cheap bcrypt cost."""
    return AuthService(
        password_hasher=BcryptPasswordHasher(rounds=4),
        token_provider=tokens,
        revocations=revocations,
    )


def _sign_up(service, email="ada@example.com", name="Ada Lovelace", password=DEFAULT_PASSWORD):
    return service.sign_up(SignUpIn(name=name, email=email, password=password))


# ------------------------------ Sign-up ----------------------------------- #
def test_sign_up_returns_tokens_and_public_user(service, tokens, session):
    out = _sign_up(service)

    assert isinstance(out, AuthSessionOut)
    assert out.user.email == "ada@example.com"
    assert out.user.name == "Ada Lovelace"
    assert not hasattr(out.user, "password_hash")
    assert not hasattr(out.user, "refresh_token")
    assert tokens.decode_access_token(out.access_token).user_id == out.user.id
    assert tokens.decode_refresh_token(out.refresh_token).version == 0


def test_sign_up_stores_hash_and_refresh_token(service, session):
    out = _sign_up(service)

    user = session.get(User, out.user.id)
    assert user.password_hash != DEFAULT_PASSWORD
    assert BcryptPasswordHasher(rounds=4).verify(DEFAULT_PASSWORD, user.password_hash)
    assert user.refresh_token == out.refresh_token
    assert user.token_version == 0


def test_sign_up_then_sign_in_round_trip(service, session):
    created = _sign_up(service)
    signed_in = service.sign_in(SignInIn(email="ada@example.com", password=DEFAULT_PASSWORD))
    assert signed_in.user.id == created.user.id


def test_duplicate_email_conflicts_without_new_row(service, session):
    _sign_up(service)

    with pytest.raises(ConflictError, match="User already exists"):
        _sign_up(service, name="Someone Else")

    assert session.query(User).filter_by(email="ada@example.com").count() == 1


def test_email_is_case_sensitive(service, session):
    _sign_up(service)
    other = _sign_up(service, email="ADA@example.com")
    assert other.user.email == "ADA@example.com"


@pytest.mark.parametrize(
    "name,email,password,message",
    [
        ("", "a@example.com", DEFAULT_PASSWORD, "Name is required"),
        ("Al", "a@example.com", DEFAULT_PASSWORD, "at least 3"),
        ("A" * 51, "a@example.com", DEFAULT_PASSWORD, "less than 50"),
        ("Alice", "not-an-email", DEFAULT_PASSWORD, "valid email"),
        ("Alice", "a@example.com", "short", "at least 8"),
        ("Alice", "a@example.com", "", "Password is required"),
    ],
)
def test_sign_up_validation(service, session, name, email, password, message):
    with pytest.raises(ValidationError, match=message):
        service.sign_up(SignUpIn(name=name, email=email, password=password))
    assert session.query(User).count() == 0


# ------------------------------ Sign-in ----------------------------------- #
def test_sign_in_unknown_email(service, session):
    with pytest.raises(NotFoundError, match="User not found"):
        service.sign_in(SignInIn(email="ghost@example.com", password=DEFAULT_PASSWORD))


@pytest.mark.parametrize("mutate", [str.upper, lambda p: p + "x", lambda p: p[:-1]])
def test_sign_in_rejects_mutated_password(service, session, mutate):
    UserFactory(email="bob@example.com")

    with pytest.raises(InvalidCredentialsError):
        service.sign_in(SignInIn(email="bob@example.com", password=mutate(DEFAULT_PASSWORD)))


def test_sign_in_with_factory_user(service, session):
    user = UserFactory(email="carol@example.com", password="CarolPass1")
    out = service.sign_in(SignInIn(email="carol@example.com", password="CarolPass1"))

    assert out.user.id == user.id
    assert session.get(User, user.id).refresh_token == out.refresh_token


def test_second_sign_in_invalidates_first_refresh_token(service, session):
    _sign_up(service)
    first = service.sign_in(SignInIn(email="ada@example.com", password=DEFAULT_PASSWORD))
    second = service.sign_in(SignInIn(email="ada@example.com", password=DEFAULT_PASSWORD))

    assert first.refresh_token != second.refresh_token
    with pytest.raises(InvalidTokenError):
        service.refresh_access_token(RefreshIn(refresh_token=first.refresh_token))
    assert service.refresh_access_token(RefreshIn(refresh_token=second.refresh_token)).access_token


def test_failed_sign_in_is_logged_without_password(service, session, caplog):
    UserFactory(email="dave@example.com")

    with caplog.at_level(logging.INFO), pytest.raises(InvalidCredentialsError):
        service.sign_in(SignInIn(email="dave@example.com", password="WrongPass1"))

    assert any(r.getMessage() == "auth.signin_failed" for r in caplog.records)
    assert "WrongPass1" not in caplog.text


# ------------------------------ Refresh ----------------------------------- #
def test_refresh_issues_new_access_token_only(service, tokens, session):
    out = _sign_up(service)

    refreshed = service.refresh_access_token(RefreshIn(refresh_token=out.refresh_token))

    claims = tokens.decode_access_token(refreshed.access_token)
    assert claims.user_id == out.user.id
    assert not hasattr(refreshed, "refresh_token")
    # Not rotated: the same refresh token keeps working.
    assert service.refresh_access_token(RefreshIn(refresh_token=out.refresh_token))


def test_refresh_requires_a_token(service):
    with pytest.raises(ValidationError):
        service.refresh_access_token(RefreshIn(refresh_token=""))


def test_refresh_rejects_garbage_and_access_tokens(service, session):
    out = _sign_up(service)

    with pytest.raises(InvalidOrExpiredTokenError):
        service.refresh_access_token(RefreshIn(refresh_token="garbage"))
    with pytest.raises(InvalidOrExpiredTokenError):
        service.refresh_access_token(RefreshIn(refresh_token=out.access_token))


def test_refresh_rejects_expired_token(revocations, session):
    short = JWTTokenProvider(
        access_secret="a", refresh_secret="r", refresh_expires=timedelta(seconds=1)
    )
    service = AuthService(
        password_hasher=BcryptPasswordHasher(rounds=4),
        token_provider=short,
        revocations=revocations,
    )
    with freeze_time("2026-03-01 09:00:00"):
        out = _sign_up(service)
    with freeze_time("2026-03-01 09:00:02"), pytest.raises(InvalidOrExpiredTokenError):
        service.refresh_access_token(RefreshIn(refresh_token=out.refresh_token))


def test_refresh_for_unknown_user(service, tokens, session):
    orphan = tokens.issue_refresh_token(uuid.uuid4(), 0)
    with pytest.raises(InvalidTokenError):
        service.refresh_access_token(RefreshIn(refresh_token=orphan))


def test_refresh_rejects_token_not_in_store(service, tokens, session):
    out = _sign_up(service)
    forged = tokens.issue_refresh_token(out.user.id, 0)

    with pytest.raises(InvalidTokenError):
        service.refresh_access_token(RefreshIn(refresh_token=forged))


def test_refresh_after_sign_out_is_version_mismatch(service, session):
    out = _sign_up(service)
    assert service.refresh_access_token(RefreshIn(refresh_token=out.refresh_token))

    service.sign_out(SignOutIn(access_token=out.access_token, user_id=str(out.user.id)))

    with pytest.raises(VersionMismatchError):
        service.refresh_access_token(RefreshIn(refresh_token=out.refresh_token))


# ------------------------------ Sign-out ---------------------------------- #
def test_sign_out_revokes_access_token_and_bumps_version(service, revocations, session):
    out = _sign_up(service)

    service.sign_out(SignOutIn(access_token=out.access_token, user_id=str(out.user.id)))

    assert revocations.is_revoked(out.access_token)
    with pytest.raises(RevokedTokenError):
        service.verifier.verify_access_token(out.access_token)
    user = session.get(User, out.user.id)
    assert user.token_version == 1
    assert user.refresh_token is None


def test_sign_out_is_idempotent(service, revocations, session):
    out = _sign_up(service)
    signout = SignOutIn(access_token=out.access_token, user_id=None)

    service.sign_out(SignOutIn(access_token=out.access_token, user_id=str(out.user.id)))
    service.sign_out(signout)
    service.sign_out(signout)

    assert revocations.is_revoked(out.access_token)
    assert session.get(User, out.user.id).token_version == 1


def test_sign_out_without_token_is_a_no_op(service, revocations):
    service.sign_out(SignOutIn())
    assert len(revocations) == 0


def test_sign_out_with_garbage_token_succeeds(service, revocations):
    service.sign_out(SignOutIn(access_token="not-a-jwt", user_id=None))
    assert len(revocations) == 0


def test_sign_out_without_user_keeps_refresh_token(service, session):
    out = _sign_up(service)

    service.sign_out(SignOutIn(access_token=out.access_token, user_id=None))

    user = session.get(User, out.user.id)
    assert user.token_version == 0
    assert user.refresh_token == out.refresh_token
