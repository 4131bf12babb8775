# profilehub/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import jwt

from profilehub.services._shared.errors import ExpiredTokenError, InvalidTokenError
from profilehub.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    HS256 JWT adapter built on PyJWT.

    Access and refresh tokens are signed with distinct secrets (the caller
    resolves any fallback). Issuing depends only on the inputs, the clock and
    the secret; there is no shared mutable state.

    :param access_secret: Secret for access tokens.
    :param refresh_secret: Secret for refresh tokens.
    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    :param algorithm: JWS algorithm (HMAC family).
    :param clock: Returns the current aware UTC datetime.
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=_utcnow)

    # ------------------------------ issuing ------------------------------

    def _encode(self, claims: dict[str, Any], secret: str, lifetime: timedelta) -> str:
        now = self.clock()
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + lifetime).timestamp())
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, user_id: UUID | str) -> str:
        return self._encode(
            {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE},
            self.access_secret,
            self.access_expires,
        )

    def issue_refresh_token(self, user_id: UUID | str, token_version: int) -> str:
        # jti keeps two refresh tokens minted within the same second distinct.
        return self._encode(
            {
                "sub": str(user_id),
                "type": REFRESH_TOKEN_TYPE,
                "ver": int(token_version),
                "jti": uuid4().hex,
            },
            self.refresh_secret,
            self.refresh_expires,
        )

    # ------------------------------ decoding -----------------------------

    def _decode(self, token: str, secret: str, expected_type: str) -> TokenClaims:
        if not token:
            raise InvalidTokenError("Token is missing")
        try:
            data = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError() from exc

        if data.get("type") != expected_type:
            raise InvalidTokenError(f"Wrong token type: {expected_type} token required")
        try:
            user_id = UUID(str(data["sub"]))
        except ValueError as exc:
            raise InvalidTokenError("Invalid token subject") from exc

        version = data.get("ver")
        if expected_type == REFRESH_TOKEN_TYPE and not isinstance(version, int):
            raise InvalidTokenError("Refresh token carries no version")

        return TokenClaims(
            user_id=user_id,
            token_type=expected_type,
            issued_at=int(data["iat"]),
            expires_at=int(data["exp"]),
            version=version if isinstance(version, int) else None,
            jti=data.get("jti"),
        )

    def decode_access_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)

    def peek_expiry(self, token: str) -> int | None:
        """Read ``exp`` without verifying the signature; ``None`` if unreadable."""
        try:
            data = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
        exp = data.get("exp")
        return exp if isinstance(exp, int) and not isinstance(exp, bool) else None
