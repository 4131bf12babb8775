# profilehub/services/auth/dto.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from profilehub.core.config import parse_duration
from profilehub.services.identity.dto import UserPublicOut

logger = logging.getLogger(__name__)

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for registration.

    :param name: Display name (3–50 chars).
    :param email: Login email, stored as given.
    :param password: Raw password (hashed by the store).
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class SignOutIn:
    """
    Input DTO for sign-out.

    :param access_token: Bearer token presented with the request, if any.
    :param user_id: Authenticated user resolved by the auth guard, if any.
    """

    access_token: str | None = None
    user_id: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthSessionOut:
    """
    Output DTO with a fresh token pair and the public user view.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param user: Public user view.
    """

    access_token: str
    refresh_token: str
    user: UserPublicOut


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    access_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_secret: Secret signing access tokens.
    :param refresh_secret: Secret signing refresh tokens.
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param algorithm: JWS algorithm.
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """
        Resolve token settings from a Flask config mapping.

        A missing ``JWT_REFRESH_SECRET`` falls back to ``JWT_SECRET``; the
        fallback is reported once at WARNING level.

        :raises ValueError: If ``JWT_SECRET`` is empty or a duration is malformed.
        """
        access_secret = config.get("JWT_SECRET")
        if not access_secret:
            raise ValueError("JWT_SECRET must be configured")

        refresh_secret = config.get("JWT_REFRESH_SECRET")
        if not refresh_secret:
            logger.warning(
                "auth.config.refresh_secret_fallback",
                extra={"detail": "JWT_REFRESH_SECRET unset; refresh tokens reuse JWT_SECRET"},
            )
            refresh_secret = access_secret

        return cls(
            access_secret=str(access_secret),
            refresh_secret=str(refresh_secret),
            access_expires=parse_duration(config.get("JWT_EXPIRES_IN", "15m")),
            refresh_expires=parse_duration(config.get("JWT_REFRESH_EXPIRES_IN", "7d")),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
        )
