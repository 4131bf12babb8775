"""Build the authentication collaborators once per application."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import Flask, current_app

from profilehub.core.config import DEV_JWT_SECRET
from profilehub.infra.crypto import BcryptPasswordHasher
from profilehub.infra.jwt import JWTTokenProvider
from profilehub.infra.redis import RedisRevocationRegistry
from profilehub.services._shared.ports import (
    InMemoryRevocationRegistry,
    PasswordHasher,
    RevocationRegistry,
    TokenProvider,
)
from profilehub.services.auth.dto import AuthTokenConfig
from profilehub.services.auth.verifier import TokenVerifier

logger = logging.getLogger(__name__)

EXTENSION_KEY = "profilehub.auth"


@dataclass(frozen=True, slots=True)
class AuthComponents:
    """
    Process-wide auth collaborators shared by every request.

    :ivar token_provider: JWT issuing/decoding adapter.
    :ivar revocations: Registry of access tokens revoked before expiry.
    :ivar password_hasher: bcrypt adapter.
    :ivar verifier: Access/refresh token verifier.
    :ivar token_config: Resolved secrets and lifetimes.
    """

    token_provider: TokenProvider
    revocations: RevocationRegistry
    password_hasher: PasswordHasher
    verifier: TokenVerifier
    token_config: AuthTokenConfig


def build_revocation_registry(app: Flask) -> RevocationRegistry:
    """Redis-backed when a client is configured, process-local otherwise."""
    client = app.extensions.get("redis_client")
    if client is not None:
        logger.info("auth.revocation.backend", extra={"backend": "redis"})
        return RedisRevocationRegistry(client)
    logger.warning(
        "auth.revocation.backend",
        extra={
            "backend": "memory",
            "detail": "revocations are process-local; run a single worker or set REDIS_URL",
        },
    )
    return InMemoryRevocationRegistry()


def init_app(app: Flask) -> AuthComponents:
    """
    Resolve token settings and register :class:`AuthComponents` on ``app``.

    :raises RuntimeError: If strong secrets are required and the development
        placeholder is still configured.
    """
    token_config = AuthTokenConfig.from_mapping(app.config)
    if app.config.get("REQUIRE_STRONG_SECRETS") and DEV_JWT_SECRET in (
        token_config.access_secret,
        token_config.refresh_secret,
    ):
        raise RuntimeError("JWT_SECRET must be set to a non-default value in production")

    provider = JWTTokenProvider(
        access_secret=token_config.access_secret,
        refresh_secret=token_config.refresh_secret,
        access_expires=token_config.access_expires,
        refresh_expires=token_config.refresh_expires,
        algorithm=token_config.algorithm,
    )
    revocations = build_revocation_registry(app)
    components = AuthComponents(
        token_provider=provider,
        revocations=revocations,
        password_hasher=BcryptPasswordHasher(rounds=int(app.config.get("BCRYPT_ROUNDS", 10))),
        verifier=TokenVerifier(token_provider=provider, revocations=revocations),
        token_config=token_config,
    )
    app.extensions[EXTENSION_KEY] = components
    return components


def get_auth_components(app: Flask | None = None) -> AuthComponents:
    """Return the components registered on ``app`` (default: the current app)."""
    target = app or current_app
    try:
        return target.extensions[EXTENSION_KEY]
    except KeyError as exc:
        raise RuntimeError("Auth components are not initialized. Call init_app() first.") from exc
